import click
from flask.cli import with_appcontext

from daofactory.models.member import ROLE_ADMIN, ROLE_MEMBER
from daofactory.services import registry
from daofactory.services.errors import ServiceError


@click.group()
def daos():
    """DAO registry ops."""


@daos.command("create")
@click.option("--name", required=True)
@click.option("--description", required=True)
@click.option("--creator", required=True, help="Creator address; becomes the first admin")
@click.option("--creator-name", default=None)
@click.option("--threshold", type=int, default=None, help="Approval threshold percent (1-100)")
@with_appcontext
def daos_create(name, description, creator, creator_name, threshold):
    try:
        dao = registry.create_dao(
            name=name,
            description=description,
            creator=creator,
            creator_name=creator_name,
            approval_threshold=threshold,
        )
    except ServiceError as e:
        raise click.ClickException(e.message)
    click.echo(f"DAO created id={dao.id} name={dao.name!r} threshold={dao.approval_threshold}%")


@daos.command("reconcile")
@click.option("--dao-id", type=int, default=None, help="Limit the check to one DAO")
@with_appcontext
def daos_reconcile(dao_id):
    """Compare denormalized counters with row counts; exit 1 on any drift."""
    mismatches = registry.reconcile_counters(dao_id)
    if not mismatches:
        click.echo("Counters consistent")
        return
    for m in mismatches:
        where = f"dao {m['dao_id']}"
        if "proposal_id" in m:
            where += f" proposal {m['proposal_id']}"
        click.echo(f"{where}: {m['field']} stored={m['stored']} actual={m['actual']}")
    raise click.exceptions.Exit(1)


@click.group()
def members():
    """DAO membership ops."""


@members.command("invite")
@click.option("--dao-id", type=int, required=True)
@click.option("--inviter", required=True, help="Address of an existing admin")
@click.option("--address", required=True)
@click.option("--display-name", default=None)
@click.option("--role", type=click.Choice([ROLE_MEMBER, ROLE_ADMIN]), default=ROLE_MEMBER)
@with_appcontext
def members_invite(dao_id, inviter, address, display_name, role):
    try:
        registry.invite_member(
            dao_id,
            inviter=inviter,
            btc_address=address,
            display_name=display_name,
            role=role,
        )
    except ServiceError as e:
        raise click.ClickException(e.message)
    click.echo(f"Added {address} to dao {dao_id} as {role}")


def register_cli(app):
    app.cli.add_command(daos)
    app.cli.add_command(members)
