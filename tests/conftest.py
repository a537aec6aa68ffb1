from __future__ import annotations

import pytest
from flask.testing import FlaskClient

from finmodel import Model
from finmodel.app import create_app
from finmodel.config import AppConfig


@pytest.fixture()
def client() -> FlaskClient:
    app = create_app(AppConfig())
    app.config["TESTING"] = True
    with app.test_client() as test_client:
        yield test_client


@pytest.fixture()
def counter_model() -> Model:
    """a grows by one each period, b is three times a."""
    model = Model(40)
    model.add_variables(["a", "b"])
    model.set_initials({"a": 10, "b": 30})
    model.set_rules([("a", ":a[-1] + 1"), ("b", ":a[+0] * 3")])
    return model


@pytest.fixture()
def company_model() -> Model:
    """Twelve periods of a small company: P&L feeding cash and retained earnings."""
    model = Model(12)
    model.set_parameters(
        {
            "production": [10] * 13,
            "price": 8,
            "cost": 4,
            "depreciation": 2,
            "incometaxrate": 0.2,
        }
    )
    model.add_variables(
        ["revenue", "cogs", "operatingp", "incometax", "netp", "cash", "fixedassets", "retained"]
    )
    model.set_initials({"cash": 0, "fixedassets": 100, "retained": 100})
    model.set_rules(
        [
            ("revenue", ":production[+0] * :price"),
            ("cogs", ":production[+0] * :cost"),
            ("operatingp", ":revenue[+0] - :cogs[+0] - :depreciation"),
            ("incometax", ":operatingp[+0] * :incometaxrate"),
            ("netp", ":operatingp[+0] - :incometax[+0]"),
            ("cash", ":cash[-1] + :netp[+0]"),
            ("retained", ":retained[-1] + :netp[+0]"),
            ("fixedassets", ":fixedassets[-1]"),
        ]
    )
    return model
