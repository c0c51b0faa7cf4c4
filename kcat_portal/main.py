"""CLI entrypoint for kcat search, prediction and persistence."""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path
from typing import List, Optional

from kcat_portal.core.settings import get_settings
from kcat_portal.interfaces.cli import console, render_error, render_records, render_user
from kcat_portal.interfaces.schemas import DLTKcatRequest, QueryFilter, UniKPRequest, User
from kcat_portal.services.aggregator import results_frame
from kcat_portal.services.session import SessionStore
from kcat_portal.workflows.kcat_workbench import KcatWorkbench, Outcome


def _session_store() -> SessionStore:
    path = get_settings().session.path
    return SessionStore(Path(path) if path else None)


def _report(outcomes: List[Outcome]) -> int:
    failed = [outcome for outcome in outcomes if not outcome.ok]
    for outcome in failed:
        render_error(outcome.message, title=outcome.error.kind.value)
    return 1 if failed else 0


async def _search(args: argparse.Namespace) -> int:
    workbench = KcatWorkbench(_session_store(), redirect_delay=0, json_logs=False)
    outcome = await workbench.search(
        QueryFilter(
            ec_number=args.ec_number,
            prot_id=args.prot_id,
            substrate_name=args.substrate,
            substrate_smiles=args.smiles,
        )
    )
    await _finish(workbench)
    if outcome.ok:
        records = workbench.merged_results()
        render_records(records, title="Measured kcat")
        if args.csv:
            results_frame(records).to_csv(args.csv, index=False)
            console.print(f"Wrote {len(records)} rows to {args.csv}")
    return _report([outcome])


async def _predict(args: argparse.Namespace) -> int:
    workbench = KcatWorkbench(_session_store(), redirect_delay=0, json_logs=False)
    unikp_request = UniKPRequest(substrate_smiles=args.smiles, protein_sequence=args.sequence)
    dltkcat_request = DLTKcatRequest(
        substrate_smiles=args.smiles,
        protein_sequence=args.sequence,
        temperature_celsius=args.temperature,
    )

    if args.model == "unikp":
        outcomes = [await workbench.predict_unikp(unikp_request)]
    elif args.model == "dltkcat":
        outcomes = [await workbench.predict_dltkcat(dltkcat_request)]
    else:
        outcomes = list(await workbench.predict_both(unikp_request, dltkcat_request))

    render_records(workbench.merged_results(), title="Predicted kcat")

    if args.save:
        for outcome in [o for o in outcomes if o.ok]:
            saved = await workbench.save(outcome.value)
            outcomes.append(saved)
            if saved.ok:
                console.print(
                    f"Saved {outcome.value.model_name} prediction as record {saved.value}"
                )

    await _finish(workbench)
    return _report(outcomes)


async def _finish(workbench: KcatWorkbench) -> None:
    if workbench.pending_teardown is not None:
        await workbench.pending_teardown


def _session(args: argparse.Namespace) -> int:
    store = _session_store()
    if args.action == "set":
        store.set_session(
            args.token,
            User(id=args.user_id, username=args.username, email=args.email or ""),
        )
    elif args.action == "clear":
        store.clear()
    render_user(store.get_user())
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description=(
            "Look up measured enzyme kcat values and predict new ones with UniKP or DLTKcat"
        ),
    )
    commands = parser.add_subparsers(dest="command", required=True)

    session = commands.add_parser("session", help="Manage the stored login session")
    session.add_argument("action", choices=["set", "show", "clear"])
    session.add_argument("--token")
    session.add_argument("--user-id", type=int)
    session.add_argument("--username")
    session.add_argument("--email")

    search = commands.add_parser("search", help="Search measured kcat records")
    search.add_argument("--ec-number", help="EC number, e.g. 1.1.1.1")
    search.add_argument("--prot-id", help="Protein identifier, e.g. P12345")
    search.add_argument("--substrate", help="Substrate name")
    search.add_argument("--smiles", help="Substrate SMILES")
    search.add_argument("--csv", help="Also write the results to this CSV file")

    predict = commands.add_parser("predict", help="Predict kcat with one or both models")
    predict.add_argument("model", choices=["unikp", "dltkcat", "both"])
    predict.add_argument("--smiles", required=True, help="Substrate SMILES")
    predict.add_argument("--sequence", required=True, help="Protein amino acid sequence")
    predict.add_argument("--temperature", type=float, help="Temperature in °C (DLTKcat)")
    predict.add_argument("--save", action="store_true", help="Store successful predictions")
    return parser


def main(argv: Optional[List[str]] = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command == "session":
        if args.action == "set" and not (args.token and args.user_id is not None and args.username):
            parser.error("session set requires --token, --user-id and --username")
        sys.exit(_session(args))
    if args.command == "search":
        sys.exit(asyncio.run(_search(args)))
    sys.exit(asyncio.run(_predict(args)))


if __name__ == "__main__":
    main()
