import click
from flask import Flask

from restaurant_backend import db
from restaurant_backend.models import User
from restaurant_backend.services.helper import hash_password


def register_commands(app: Flask):

    @app.cli.command("init-db")
    def init_db():
        """Create all tables that do not exist yet."""
        db.create_all()
        click.echo("Database initialised.")

    @app.cli.command("create-admin")
    @click.argument("username")
    @click.argument("email")
    @click.password_option()
    def create_admin(username, email, password):
        """Create the first admin account, staff management needs one."""
        exists = User.query.filter(
            (User.username == username) | (User.email == email.lower())
        ).first()
        if exists:
            raise click.ClickException("User already exists")

        admin = User(
            username=username,
            email=email.lower(),
            password=hash_password(password),
            role="admin",
            rank="executive",
        )
        db.session.add(admin)
        db.session.commit()
        click.echo(f"Admin {username} created with id {admin.id}.")
