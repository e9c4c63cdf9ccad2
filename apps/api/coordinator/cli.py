"""CLI tools for coordinator administration."""

import click

from coordinator.db import models  # noqa: F401  (registers tables on Base.metadata)
from coordinator.db.base import Base
from coordinator.db.session import SessionLocal, engine
from coordinator.services import proposal_service


@click.group()
def cli():
    """Coordinator CLI tools."""
    pass


@cli.command()
def init_db():
    """
    Create all tables on the configured database.

    Example:
        python -m coordinator.cli init-db
    """
    Base.metadata.create_all(bind=engine)
    click.echo(f"✓ Created {len(Base.metadata.tables)} tables")


@cli.command()
def expire_proposals():
    """
    Mark pending proposals past their TTL as expired.

    Reads already treat them as expired; this keeps stored status in step.
    """
    db = SessionLocal()
    try:
        count = proposal_service.expire_stale_proposals(db)
        click.echo(f"✓ Expired {count} proposal(s)")
    except Exception as e:
        db.rollback()
        click.echo(f"❌ Error: {e}")
        raise SystemExit(1)
    finally:
        db.close()


if __name__ == "__main__":
    cli()
