#!/usr/bin/env python3
"""
Admin tools for the examguard violation ledger.
"""

import os
import argparse
from typing import Optional

from dotenv import load_dotenv
from sqlalchemy import func, select
from sqlalchemy.orm import Session

dotenv_path = os.path.join(os.getcwd(), '.env')
if os.path.exists(dotenv_path):
    load_dotenv(dotenv_path)

from examguard.core.database import SessionLocal, create_db_and_tables
from examguard.core.security import ExamContext
from examguard.models.violation_event import ViolationEvent
from examguard.services.exam_session_service import ExamSessionService
from examguard.services.violation_ledger import ViolationLedger
from examguard.utils.timezone import format_local_time


def get_db() -> Session:
    return SessionLocal()


def init_db() -> None:
    create_db_and_tables()
    print("Database tables are ready")


def show_sessions(user_id: Optional[int] = None, session_id: Optional[str] = None) -> None:
    db = get_db()
    try:
        sessions = ExamSessionService(db).list_sessions(user_id=user_id, session_id=session_id)
        if not sessions:
            print("No exam sessions found")
            return

        print(f"\nExam sessions ({len(sessions)})")
        print("=" * 60)
        for exam_session in sessions:
            started = format_local_time(exam_session.started_at)
            ended = format_local_time(exam_session.ended_at) if exam_session.ended_at else "open"
            reason = f" ({exam_session.ended_reason})" if exam_session.ended_reason else ""
            print(f"  #{exam_session.id} session={exam_session.session_id} user={exam_session.user_id} "
                  f"started={started} ended={ended}{reason}")
    finally:
        db.close()


def show_session_violations(session_id: str, user_id: int) -> None:
    db = get_db()
    try:
        context = ExamContext(user_id=user_id, session_id=session_id)
        stats = ViolationLedger(db).get_statistics(context)

        print(f"\nViolations for session {session_id}, user {user_id}")
        print("=" * 60)
        if not stats.total_violations:
            print("No violations recorded")
            return

        print(f"Total: {stats.total_violations}")
        for event_type, count in sorted(stats.by_type.items(), key=lambda x: x[1], reverse=True):
            print(f"  - {event_type}: {count}")

        print("\nTimeline:")
        for entry in stats.timeline:
            print(f"  [{format_local_time(entry.event_time)}] {entry.event_type}")
    finally:
        db.close()


def show_violations_report(limit: int = 10) -> None:
    db = get_db()
    try:
        total = db.execute(select(func.count(ViolationEvent.id))).scalar_one()
        print(f"\nViolation report: {total} events")
        print("=" * 60)
        if not total:
            return

        by_type = db.execute(
            select(ViolationEvent.event_type, func.count(ViolationEvent.id))
            .group_by(ViolationEvent.event_type)
            .order_by(func.count(ViolationEvent.id).desc())
            .limit(limit)
        ).all()
        print("Top event types:")
        for i, (event_type, count) in enumerate(by_type, 1):
            print(f"  {i}. {event_type}: {count}")

        by_user = db.execute(
            select(ViolationEvent.user_id, func.count(ViolationEvent.id))
            .group_by(ViolationEvent.user_id)
            .order_by(func.count(ViolationEvent.id).desc())
            .limit(5)
        ).all()
        print("\nUsers with most violations:")
        for i, (uid, count) in enumerate(by_user, 1):
            print(f"  {i}. user {uid}: {count}")
    finally:
        db.close()


def database_stats() -> None:
    db = get_db()
    try:
        sessions = ExamSessionService(db).list_sessions()
        open_count = sum(1 for s in sessions if s.is_open)
        terminated = sum(1 for s in sessions if s.ended_reason == "terminated")
        events = db.execute(select(func.count(ViolationEvent.id))).scalar_one()

        print("\nDatabase statistics")
        print("=" * 60)
        print(f"  Exam sessions: {len(sessions)} (open: {open_count}, terminated: {terminated})")
        print(f"  Violation events: {events}")
    finally:
        db.close()


def main(argv=None):
    parser = argparse.ArgumentParser(description="examguard admin tools")
    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    subparsers.add_parser('init-db', help='Create database tables')

    sessions_parser = subparsers.add_parser('sessions', help='List exam sessions')
    sessions_parser.add_argument('--user-id', type=int, help='User ID')
    sessions_parser.add_argument('--session-id', help='Exam session ID')

    session_violations_parser = subparsers.add_parser('session-violations', help='Violations of one exam session')
    session_violations_parser.add_argument('--session-id', required=True, help='Exam session ID')
    session_violations_parser.add_argument('--user-id', type=int, required=True, help='User ID')

    report_parser = subparsers.add_parser('violations-report', help='Report over all violation events')
    report_parser.add_argument('--limit', type=int, default=10, help='Number of event types to show')

    subparsers.add_parser('stats', help='Database statistics')

    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    if args.command == 'init-db':
        init_db()

    elif args.command == 'sessions':
        show_sessions(args.user_id, args.session_id)

    elif args.command == 'session-violations':
        show_session_violations(args.session_id, args.user_id)

    elif args.command == 'violations-report':
        show_violations_report(args.limit)

    elif args.command == 'stats':
        database_stats()

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
