from __future__ import annotations

from datetime import datetime, timezone
import uuid

from sqlalchemy.ext.compiler import compiles
from sqlalchemy.schema import CreateColumn


# utf8mb4 is MySQL's name for full UTF-8; other dialects ignore mysql_* options.
TABLE_OPTIONS = {"mysql_engine": "InnoDB", "mysql_charset": "utf8mb4"}

# Column.info key: the database itself stamps the column on every UPDATE.
ON_UPDATE_NOW = "on_update_now"


@compiles(CreateColumn, "mysql", "mariadb")
def _render_on_update_now(element, compiler, **kw):
    text = compiler.visit_create_column(element, **kw)
    if text is not None and element.element.info.get(ON_UPDATE_NOW):
        text += " ON UPDATE CURRENT_TIMESTAMP"
    return text


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def uuid_str() -> str:
    return str(uuid.uuid4())
