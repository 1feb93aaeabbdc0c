"""Command-line interface for team formation."""

from __future__ import annotations

import argparse

from teammate.config import STRATEGIES, load_config
from teammate.domain.db import DEFAULT_DB_URL, get_session, init_database
from teammate.domain.models import Participant
from teammate.domain.repositories import FormationRunRepository, ParticipantRepository
from teammate.engine.orchestrator import form_teams
from teammate.io.export_csv import export_run_csv, export_teams_csv
from teammate.io.import_csv import import_participants_csv, read_participants_csv
from teammate.services.report import summarize_report
from teammate.survey import conduct_new_surveys


def _db_url(args: argparse.Namespace) -> str:
    return args.db or DEFAULT_DB_URL


def _cmd_init_db(args: argparse.Namespace) -> None:
    """Initialize the database."""
    init_database(_db_url(args))
    print(f"[OK] Database initialized: {_db_url(args)}")


def _cmd_import_csv(args: argparse.Namespace) -> None:
    """Import participants CSV into database."""
    session = get_session(_db_url(args))
    try:
        count = import_participants_csv(session, args.participants)
        print(f"[OK] Imported {count} participants")
    except Exception as e:
        session.rollback()
        print(f"[ERROR] Import failed: {e}")
        raise
    finally:
        session.close()


def _cmd_survey(args: argparse.Namespace) -> None:
    """Survey new participants interactively and store them."""
    session = get_session(_db_url(args))
    try:
        existing = {p.participant_id for p in ParticipantRepository.get_all(session)}
        completed = conduct_new_surveys(args.count, existing_ids=existing)
        participants = [
            Participant.from_candidate(candidate, survey_responses=result.encoded_responses())
            for candidate, result in completed
        ]
        if participants:
            ParticipantRepository.upsert_many(session, participants)
        print(f"[OK] Stored {len(participants)} surveyed participants")
    except Exception as e:
        session.rollback()
        print(f"[ERROR] Survey failed: {e}")
        raise
    finally:
        session.close()


def _cmd_view(args: argparse.Namespace) -> None:
    """List stored participants."""
    session = get_session(_db_url(args))
    try:
        participants = ParticipantRepository.get_all(session)
        if not participants:
            print("No participants loaded.")
            return
        surveyed = sum(1 for p in participants if p.survey_completed)
        print(f"Total: {len(participants)} participants")
        print(f"Surveyed: {surveyed}")
        for p in participants:
            status = "[SURVEYED]" if p.survey_completed else "[NO SURVEY]"
            print(f"{status} {p.to_candidate()}")
    except Exception as e:
        print(f"[ERROR] View failed: {e}")
        raise
    finally:
        session.close()


def _cmd_form(args: argparse.Namespace) -> None:
    """Form teams from a CSV file or from surveyed participants in the database."""
    session = get_session(_db_url(args))
    try:
        cfg = load_config(args.config)
        if args.participants:
            candidates = read_participants_csv(args.participants)
        else:
            candidates = [p.to_candidate() for p in ParticipantRepository.get_surveyed(session)]

        if not candidates:
            raise SystemExit("No surveyed participants available. Import a CSV or run a survey first.")

        team_size = args.team_size if args.team_size is not None else cfg.team_size
        if team_size < 2 or team_size > len(candidates):
            raise SystemExit(f"Team size must be between 2 and {len(candidates)}, got {team_size}")

        assignment, report = form_teams(
            candidates,
            team_size,
            cfg,
            seed=args.seed,
            strategy=args.strategy,
            session=session,
            persist=not args.no_persist,
        )
        print(summarize_report(report, assignment))

        if args.out:
            export_teams_csv(assignment, args.out)
    except Exception as e:
        session.rollback()
        print(f"[ERROR] Team formation failed: {e}")
        raise
    finally:
        session.close()


def _cmd_export(args: argparse.Namespace) -> None:
    """Export the teams of a stored run to CSV."""
    session = get_session(_db_url(args))
    try:
        run_id = args.run
        if run_id is None:
            latest = FormationRunRepository.get_latest(session)
            if latest is None:
                raise SystemExit("No formation runs stored yet.")
            run_id = latest.id
        count = export_run_csv(session, run_id, args.out)
        print(f"[OK] Exported {count} team members to {args.out}")
    except Exception as e:
        print(f"[ERROR] Export failed: {e}")
        raise
    finally:
        session.close()


def main(argv: list[str] | None = None) -> None:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="teammate",
        description="TeamMate: balanced team formation",
    )

    # Global options
    parser.add_argument("--db", help=f"Database URL (default: {DEFAULT_DB_URL})")

    sub = parser.add_subparsers(dest="command", required=True)

    init = sub.add_parser("init-db", help="Initialize database")
    init.set_defaults(func=_cmd_init_db)

    imp = sub.add_parser("import-csv", help="Import participants CSV into database")
    imp.add_argument("--participants", required=True, help="Path to participants CSV")
    imp.set_defaults(func=_cmd_import_csv)

    srv = sub.add_parser("survey", help="Survey new participants interactively")
    srv.add_argument("--count", type=int, required=True, help="Number of participants to survey")
    srv.set_defaults(func=_cmd_survey)

    view = sub.add_parser("view", help="List stored participants")
    view.set_defaults(func=_cmd_view)

    form = sub.add_parser("form", help="Form teams")
    form.add_argument("--team-size", type=int, help="Members per team (default: from config)")
    form.add_argument("--config", help="Path to config YAML/JSON")
    form.add_argument("--seed", type=int, help="Random seed for reproducible teams")
    form.add_argument("--strategy", choices=STRATEGIES, help="Override the configured strategy")
    form.add_argument("--participants", help="Read participants from this CSV instead of the database")
    form.add_argument("--out", help="Optional: export teams to CSV")
    form.add_argument("--no-persist", action="store_true", help="Do not store the run in the database")
    form.set_defaults(func=_cmd_form)

    exp = sub.add_parser("export", help="Export a stored formation run to CSV")
    exp.add_argument("--run", type=int, help="Run id (default: latest)")
    exp.add_argument("--out", required=True, help="Path to teams CSV")
    exp.set_defaults(func=_cmd_export)

    args = parser.parse_args(argv)
    args.func(args)


if __name__ == "__main__":
    main()
