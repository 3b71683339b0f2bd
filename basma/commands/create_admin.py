import click
from flask.cli import with_appcontext

from basma import db
from basma.constants import ELEVATED_ROLES, Role
from basma.models import Member, RoleAssignment


@click.command('create-admin')
@click.option('--email', required=True, help='Login email of the account')
@click.option('--password', required=True, prompt=True, hide_input=True,
              confirmation_prompt=True, help='Initial password')
@click.option('--full-name', default='Administrator', show_default=True, help='Display name')
@click.option('--role', default=Role.ADMIN, show_default=True,
              type=click.Choice(sorted(ELEVATED_ROLES)), help='Elevated role to assign')
@with_appcontext
def create_admin(email, password, full_name, role):
    """
    Creates an elevated account, or promotes the existing account with that email.
    """
    email = email.strip().lower()
    member = Member.query.filter_by(email=email).first()

    try:
        if member is None:
            member = Member(email=email, full_name=full_name)
            member.set_password(password)
            db.session.add(member)
            db.session.flush()  # Get member.id
            click.echo(f"Created member {email}")
        else:
            click.echo(f"Member {email} already exists, updating role")

        if member.role_assignment is None:
            member.role_assignment = RoleAssignment(role=role)
        else:
            member.role_assignment.role = role

        db.session.commit()
        click.echo(f"Successfully set role '{role}' for {email} (id {member.id})")
    except Exception as e:
        db.session.rollback()
        click.echo(f"Error creating admin: {e}", err=True)
        raise click.Abort()
