# src/app.py
from __future__ import annotations

import argparse
import copy
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

# local imports
from api_client import ReportApiClient
from editstate import DEFAULT_MAX_HISTORY, RowTable
from errors import HydrationFailure, ValidationFailure
from sections import SectionRegistry
from wizard import WizardController

log = logging.getLogger("app")


# ---------------------------
# Config loading
# ---------------------------

DEFAULT_CONFIG: Dict[str, Any] = {
    "api": {
        "base_url": "http://localhost:5000/api",
        "token": None,
        "timeout": 10.0,
    },
    "wizard": {
        "animate_transitions": False,
        "max_history": 10,  # undo snapshots kept
    },
    "sections": {
        "plugins_dir": None,  # folder of *.yaml section overrides
    },
    "logging": {
        "level": "INFO",
    },
    "output": {
        "pretty": True,
    },
}


def load_config(path: Optional[str]) -> Dict[str, Any]:
    cfg = copy.deepcopy(DEFAULT_CONFIG)
    if path:
        p = Path(path)
        if not p.exists():
            log.warning("config not found: %s (using defaults)", p)
            return cfg
        with p.open("r", encoding="utf-8") as f:
            user = yaml.safe_load(f) or {}
        # shallow merge per top-level block
        for k, v in user.items():
            if isinstance(v, dict) and k in cfg and isinstance(cfg[k], dict):
                cfg[k].update(v)
            else:
                cfg[k] = v
    return cfg


def setup_logging(level: str = "INFO") -> None:
    """One stderr handler, "[name] LEVEL message"; calling again only changes the level."""
    root = logging.getLogger()
    root.setLevel(getattr(logging, str(level).upper(), logging.INFO))
    if any(h.get_name() == "pmreport" for h in root.handlers):
        return
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter("[%(name)s] %(levelname)s %(message)s"))
    handler.set_name("pmreport")
    root.addHandler(handler)


# ---------------------------
# App bootstrap
# ---------------------------

def build_controller(config: Dict[str, Any], transport=None) -> WizardController:
    api_cfg = config.get("api", {})
    api = ReportApiClient(
        api_cfg.get("base_url", DEFAULT_CONFIG["api"]["base_url"]),
        token=api_cfg.get("token"),
        timeout=float(api_cfg.get("timeout", 10.0)),
        transport=transport,
    )
    registry = SectionRegistry(plugins_dir=config.get("sections", {}).get("plugins_dir"))
    wiz_cfg = config.get("wizard", {})
    return WizardController(
        api, registry,
        animate_transitions=bool(wiz_cfg.get("animate_transitions", False)),
        max_history=int(wiz_cfg.get("max_history", DEFAULT_MAX_HISTORY)),
    )


def apply_edits(controller: WizardController, edits: List[Dict[str, Any]]) -> int:
    """
    Replay a scripted edit list. Rows are addressed by their displayed serial number.
      - {section: signOff, set: {attendedBy: "J. Tan"}}
      - {section: serverHealth, collection: servers, add: {serverName: SRV-03}}
      - {section: serverHealth, collection: servers, row: 2, set: {result: Pass}}
      - {section: serverHealth, collection: servers, row: 2, delete: true}
      - {section: serverHealth, collection: servers, row: 2, restore: true}
    Returns the number of applied entries.
    """
    applied = 0
    for i, edit in enumerate(edits or [], start=1):
        model = controller.section(edit["section"])
        coll = edit.get("collection")
        if coll is None:
            for fname, value in (edit.get("set") or {}).items():
                model.set_field(fname, value)
            applied += 1
            continue

        if "add" in edit:
            model.add_row(coll, edit.get("add") or {})
            applied += 1
            continue

        table = model.data.collections.get(coll)
        if table is None:
            raise ValueError(f"edit {i}: unknown collection {edit['section']}.{coll}")
        serial = int(edit["row"])
        handle = _row_handle(table, serial, deleted=bool(edit.get("restore")))
        if handle is None:
            raise ValueError(f"edit {i}: no row {serial} in {edit['section']}.{coll}")

        if edit.get("delete"):
            model.delete_row(coll, handle)
        elif edit.get("restore"):
            model.restore_row(coll, handle)
        else:
            for fname, value in (edit.get("set") or {}).items():
                model.edit_row(coll, handle, fname, value)
        applied += 1
    return applied


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Server PM report edit/review")
    parser.add_argument("report_id", help="Report form id to edit")
    parser.add_argument("--config", "-c", help="Path to config.yaml", default=None)
    parser.add_argument("--base-url", help="Override api.base_url", default=None)
    parser.add_argument("--edits", "-e", help="YAML file with a list of edits to apply", default=None)
    parser.add_argument("--payload", "-o", help="Write the submission payload to this file", default=None)
    parser.add_argument("--submit", action="store_true", help="Send the payload to the backend")
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    args = parser.parse_args(argv)

    config = load_config(args.config)
    if args.base_url:
        config["api"]["base_url"] = args.base_url
    setup_logging("DEBUG" if args.verbose else config.get("logging", {}).get("level", "INFO"))

    controller = build_controller(config)
    try:
        try:
            controller.load(args.report_id)
        except HydrationFailure as e:
            log.error("%s", e)
            return 2

        if args.edits:
            with open(args.edits, "r", encoding="utf-8") as f:
                edits = yaml.safe_load(f) or []
            n = apply_edits(controller, edits)
            log.info("applied %d edit(s) from %s", n, args.edits)

        for key, title, done in controller.progress():
            print(f"[{'x' if done else ' '}] {title}")

        try:
            payload = controller.assemble_submission()
        except ValidationFailure as e:
            for err in e.errors:
                print(f"[app] {err}")
            return 3

        text = controller.builder.dumps(payload, pretty=bool(config.get("output", {}).get("pretty", True)))
        if args.payload:
            Path(args.payload).write_text(text, encoding="utf-8")
            log.info("payload written to %s", args.payload)
        else:
            print(text)

        if args.submit:
            outcome = controller.submit()
            if not outcome.ok:
                for err in outcome.errors:
                    print(f"[app] {err}")
                return 4
            print("[app] submitted.")
        return 0
    finally:
        controller.api.close()


# ---------------------------
# Helpers
# ---------------------------

def _row_handle(table: RowTable, serial_no: int, deleted: bool = False) -> Optional[int]:
    """Visible row by serial; with deleted=True, the soft-deleted row that last showed it."""
    if not deleted:
        return table.handle_for_serial(serial_no)
    for row in table.rows:
        if row.flags.is_deleted and row.serial_no == serial_no:
            return row.handle
    return None


if __name__ == "__main__":
    raise SystemExit(main())
