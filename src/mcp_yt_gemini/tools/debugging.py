"""Debugging and diagnostic tool implementations."""

import json
from pathlib import Path

from ..browser.chrome import devtools_active_port_from_file
from ..context import get_context
from ..utils.diagnostics import collect_diagnostics


async def get_debug_info() -> str:
    ctx = get_context()
    cfg = ctx.config or {}
    udir = cfg.get("user_data_dir")
    port_val = devtools_active_port_from_file(udir) if udir else None

    agents = {}
    if ctx.tabs is not None:
        for tab_id, agent in ctx.tabs.agents().items():
            outcome = getattr(agent, "last_outcome", None)
            agents[tab_id] = {
                "state": getattr(getattr(agent, "state", None), "value", None),
                "last_outcome": outcome.value if outcome is not None else None,
                "delivering": getattr(agent, "is_delivering", False),
            }

    state = ctx.correlator.state if ctx.correlator is not None else None
    diagnostics = {
        "summary": collect_diagnostics(ctx),
        "driver_initialized": ctx.is_driver_initialized(),
        "debugger": ctx.get_debugger_address(),
        "devtools_active_port_file": {
            "path": str(Path(udir) / "DevToolsActivePort") if udir else None,
            "port": port_val,
            "exists": port_val is not None,
        },
        "correlation": {
            "current_request_id": state.current_request_id if state else None,
            "waiting_for_tab": state.active_wait.tab_id if state and state.active_wait else None,
        },
        "agents": agents,
    }
    return json.dumps({"ok": True, "diagnostics": diagnostics})
