# storefront/cli.py
import click
from werkzeug.security import generate_password_hash

from .extensions import db
from .model import Category, Product, User
from .utils.money import D

SAMPLE_CATALOG = {
    "Electronics": [
        ("Wireless Mouse", "Ergonomic 2.4 GHz mouse", "19.99", 120),
        ("USB-C Hub", "7-in-1 hub with HDMI and card reader", "34.50", 60),
        ("Bluetooth Speaker", "Portable waterproof speaker", "45.00", 8),
    ],
    "Home": [
        ("Ceramic Mug", "350 ml stoneware mug", "5.00", 200),
        ("Desk Lamp", "LED lamp with dimmer", "27.90", 40),
    ],
    "Books": [
        ("Python Cookbook", "Recipes for mastering Python 3", "39.99", 15),
        ("Notebook A5", "Dotted, 120 pages", "6.75", 5),
    ],
}

@click.command("create-admin")
@click.option("--email", required=True)
@click.option("--password", required=True)
@click.option("--first-name", required=True)
@click.option("--last-name", default="")
def create_admin(email, password, first_name, last_name):
    email = email.strip().lower()
    if User.query.filter_by(email=email).first():
        click.echo("Email already exists"); return
    u = User(email=email, first_name=first_name, last_name=last_name,
             password_hash=generate_password_hash(password), role="admin")
    db.session.add(u); db.session.commit()
    click.echo(f"Admin created: {u.id} {u.email}")

@click.command("seed-catalog")
def seed_catalog():
    """Insert sample categories and products (skips names that already exist)."""
    added = 0
    for cat_name, products in SAMPLE_CATALOG.items():
        cat = Category.query.filter_by(name=cat_name).first()
        if not cat:
            cat = Category(name=cat_name)
            db.session.add(cat)
            db.session.flush()
        for name, description, price, stock in products:
            if Product.query.filter_by(name=name).first():
                continue
            db.session.add(Product(name=name, description=description, price=D(price),
                                   stock=stock, category_id=cat.id))
            added += 1
    db.session.commit()
    click.echo(f"{added} sample products have been added to the database.")

def register_cli(app):
    app.cli.add_command(create_admin)
    app.cli.add_command(seed_catalog)
