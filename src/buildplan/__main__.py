from buildplan.cli import main

main()
