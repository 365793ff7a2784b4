"""Keep SQLAlchemy quiet so audit and dispatch events stay readable."""

import logging

for _name in (
    "sqlalchemy",
    "sqlalchemy.engine",
    "sqlalchemy.pool",
    "sqlalchemy.orm",
    "sqlalchemy.dialects",
):
    logging.getLogger(_name).setLevel(logging.ERROR)
