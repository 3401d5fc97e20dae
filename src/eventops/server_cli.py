"""CLI entry point for the eventops API server and one-off ticks."""

import argparse
import asyncio
import os


async def _tick_once() -> None:
    from eventops.db.engine import create_db_engine, create_session_factory
    from eventops.events.audit import AuditSink
    from eventops.workers.engine import JobEngine
    from eventops.workers.scheduler import process_jobs

    engine = create_db_engine()
    session_factory = create_session_factory(engine)
    audit = AuditSink(session_factory)
    try:
        result = await process_jobs(JobEngine(session_factory, audit=audit))
        print(result.model_dump_json())
    finally:
        await audit.drain()
        await engine.dispose()


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        prog="eventops-server",
        description="eventops API server",
    )
    parser.add_argument("--host", default="0.0.0.0", help="Bind host (default: 0.0.0.0)")
    parser.add_argument("--port", type=int, default=8080, help="Bind port (default: 8080)")
    parser.add_argument(
        "--local",
        action="store_true",
        help="Local dev mode: SQLite database",
    )
    parser.add_argument(
        "--tick",
        action="store_true",
        help="Run a single job-processing tick and exit instead of serving",
    )
    args = parser.parse_args(argv)

    if args.local:
        os.environ["EVENTOPS_LOCAL_MODE"] = "1"

    if args.tick:
        asyncio.run(_tick_once())
        return

    import uvicorn

    uvicorn.run("eventops.main:app", host=args.host, port=args.port)


if __name__ == "__main__":
    main()
