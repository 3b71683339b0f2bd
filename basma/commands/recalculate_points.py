import click
from flask.cli import with_appcontext

from basma.services.points_service import PointsService


@click.command('recalculate-points')
@with_appcontext
def recalculate_points():
    """Resets every member's total_points to the sum of their ledger entries."""
    corrected = PointsService.recalculate_totals()
    if not corrected:
        click.echo("All totals match the ledger.")
        return
    for member_id, old_total, new_total in corrected:
        click.echo(f"Member {member_id}: {old_total} -> {new_total}")
    click.echo(f"Corrected {len(corrected)} member(s).")
