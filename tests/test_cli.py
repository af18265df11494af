from storefront.cli import SAMPLE_CATALOG
from storefront.model import Category, Product, User


def test_seed_catalog_is_idempotent(app):
    runner = app.test_cli_runner()
    expected = sum(len(v) for v in SAMPLE_CATALOG.values())

    first = runner.invoke(args=["seed-catalog"])
    assert f"{expected} sample products" in first.output
    second = runner.invoke(args=["seed-catalog"])
    assert "0 sample products" in second.output

    assert Product.query.count() == expected
    assert Category.query.count() == len(SAMPLE_CATALOG)


def test_create_admin(app):
    runner = app.test_cli_runner()
    args = ["create-admin", "--email", "Root@Example.com", "--password", "s3cret!", "--first-name", "Root"]

    assert "Admin created" in runner.invoke(args=args).output
    assert "already exists" in runner.invoke(args=args).output
    assert User.query.filter_by(email="root@example.com").one().role == "admin"
