"""
Flask CLI commands:  flask --app run <command>
"""
import click
from sqlalchemy import select

from printshop import db


def register_commands(app):

    @app.cli.command('init-db')
    def init_db():
        """Create all tables and seed the paper size catalog."""
        from printshop.services.catalog import seed_paper_sizes
        db.create_all()
        added = seed_paper_sizes()
        click.echo('Database ready ({} paper sizes added).'.format(added))

    @app.cli.command('seed-paper-sizes')
    def seed_paper_sizes_command():
        """Insert the default paper sizes if the catalog is empty."""
        from printshop.services.catalog import seed_paper_sizes
        added = seed_paper_sizes()
        click.echo('Added {} paper sizes.'.format(added))

    @app.cli.command('create-admin')
    @click.argument('username')
    @click.password_option()
    def create_admin(username, password):
        """Create an admin account, or reset its password if it exists."""
        from printshop.models import AdminUser
        admin = db.session.scalar(select(AdminUser).where(AdminUser.username == username))
        created = admin is None
        if created:
            admin = AdminUser(username=username)
            db.session.add(admin)
        admin.set_password(password)
        db.session.commit()
        click.echo('{} admin {}.'.format('Created' if created else 'Updated', username))
