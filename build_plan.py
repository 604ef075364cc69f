# build_plan.py
# Build/deploy plan for the app: scaffolding first, then the testnet deploy scripts.
from __future__ import annotations
from buildplan.dsl import plan, step

TS_NODE = ("--loader", "ts-node/esm")

PLAN = plan(
    step("create-astro", "node", *TS_NODE, "create_astro.ts", cwd="new_scripts"),

    # Deploy steps, off until the contracts are ready for the target network
    step("deploy-core", "node", *TS_NODE, "deploy_core.ts", cwd="scripts", enabled=False),
    step("deploy-generator", "node", *TS_NODE, "deploy_generator.ts", cwd="scripts", enabled=False),
    step("deploy-pools-testnet", "node", *TS_NODE, "deploy_pools_testnet.ts", cwd="scripts", enabled=False),
    name="build_app",
)
