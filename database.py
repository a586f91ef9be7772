import logging
from datetime import datetime

from sqlalchemy import CheckConstraint, Column, DateTime, ForeignKey, Integer, String, create_engine, event
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import declarative_base, relationship, scoped_session, sessionmaker

import config

logger = logging.getLogger(__name__)

Base = declarative_base()


# --- ERRORS ---
class DataClientError(Exception):
    """Base class for failures reported by the data client."""


class TransportError(DataClientError):
    """The store could not be reached or the request could not be carried out."""


class ValidationError(DataClientError):
    """The store rejected the row, e.g. a missing required field."""


# --- MODELS ---
class Employee(Base):
    __tablename__ = config.TABLE_EMPLOYEES
    __table_args__ = (CheckConstraint("full_name <> ''", name="ck_employees_full_name"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    full_name = Column(String, unique=True, nullable=False)
    role = Column(String, nullable=False, default="")
    department = Column(String, nullable=False, default="")

    def to_dict(self):
        return {
            "id": self.id,
            "full_name": self.full_name,
            "role": self.role,
            "department": self.department,
        }


class Asset(Base):
    __tablename__ = config.TABLE_ASSETS
    __table_args__ = (
        CheckConstraint("name <> ''", name="ck_assets_name"),
        CheckConstraint(
            "status IN ({})".format(", ".join(f"'{s}'" for s in config.STATUSES)),
            name="ck_assets_status",
        ),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String, nullable=False)
    type = Column(String, nullable=False)
    status = Column(String, nullable=False, default=config.STATUS_AVAILABLE)
    serial_number = Column(String, default="")
    employee_id = Column(Integer, ForeignKey(f"{config.TABLE_EMPLOYEES}.id", ondelete="SET NULL"))

    # Read-time lookup join; assigned_to is the employee's current full name
    employee = relationship("Employee", lazy="joined")

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "type": self.type,
            "status": self.status,
            "serial_number": self.serial_number or "",
            "employee_id": self.employee_id,
            "assigned_to": self.employee.full_name if self.employee else None,
        }


class AssetHistory(Base):
    __tablename__ = config.TABLE_HISTORY

    id = Column(Integer, primary_key=True, autoincrement=True)
    asset_id = Column(Integer, ForeignKey(f"{config.TABLE_ASSETS}.id", ondelete="CASCADE"), nullable=False)
    action = Column(String, nullable=False)
    details = Column(String, default="")
    created_at = Column(DateTime, default=datetime.now, nullable=False)

    def to_dict(self):
        return {
            "id": self.id,
            "asset_id": self.asset_id,
            "action": self.action,
            "details": self.details or "",
            "created_at": self.created_at,
        }


TABLES = {
    config.TABLE_ASSETS: Asset,
    config.TABLE_EMPLOYEES: Employee,
    config.TABLE_HISTORY: AssetHistory,
}


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


# --- CONTROLLER ---
class Database:
    """Generic table client: select, insert, update-by-id and delete-by-id.

    Rows go in and come out as plain dicts keyed by column name. Store
    failures surface as ``ValidationError`` (row rejected) or
    ``TransportError`` (everything else).
    """

    def __init__(self, url=None, echo=None):
        url = url or config.DB_URL
        echo = config.DB_ECHO if echo is None else echo
        connect_args = {}
        if url.startswith("sqlite"):
            connect_args["check_same_thread"] = False
        self.engine = create_engine(url, echo=echo, connect_args=connect_args)
        if self.engine.dialect.name == "sqlite":
            event.listen(self.engine, "connect", _enable_sqlite_foreign_keys)
        Base.metadata.create_all(self.engine)
        self.Session = scoped_session(sessionmaker(bind=self.engine, expire_on_commit=False))

    def get_session(self):
        return self.Session()

    def dispose(self):
        self.Session.remove()
        self.engine.dispose()

    @staticmethod
    def _model(table):
        try:
            return TABLES[table]
        except KeyError:
            raise ValueError(f"Unknown table: {table}") from None

    @staticmethod
    def _check_columns(model, row):
        columns = set(model.__table__.columns.keys())
        unknown = sorted(set(row) - columns)
        if unknown:
            raise ValidationError(f"Unknown column(s) for {model.__tablename__}: {', '.join(unknown)}")
        if "id" in row:
            raise ValidationError("Row id is assigned by the store and cannot be written")

    @staticmethod
    def _translate(exc, table, operation):
        logger.error("%s on %s failed: %s", operation, table, exc)
        if isinstance(exc, IntegrityError):
            return ValidationError(str(exc.orig))
        return TransportError(str(exc))

    def select_all(self, table, order_by=None, descending=False, filters=None):
        model = self._model(table)
        session = self.get_session()
        try:
            query = session.query(model)
            if filters:
                self._check_columns(model, {k: v for k, v in filters.items() if k != "id"})
                query = query.filter_by(**filters)
            if order_by:
                column = getattr(model, order_by)
                if descending:
                    query = query.order_by(column.desc(), model.id.desc())
                else:
                    query = query.order_by(column, model.id)
            return [r.to_dict() for r in query.all()]
        except SQLAlchemyError as e:
            raise self._translate(e, table, "select") from e
        finally:
            session.close()

    def insert(self, table, row):
        model = self._model(table)
        self._check_columns(model, row)
        session = self.get_session()
        try:
            record = model(**row)
            session.add(record)
            session.commit()
            session.refresh(record)
            logger.info("Inserted %s row %s", table, record.id)
            return record.to_dict()
        except SQLAlchemyError as e:
            session.rollback()
            raise self._translate(e, table, "insert") from e
        finally:
            session.close()

    def update_by_id(self, table, row_id, patch):
        model = self._model(table)
        self._check_columns(model, patch)
        session = self.get_session()
        try:
            record = session.query(model).filter_by(id=row_id).first()
            if record is None:
                raise ValidationError(f"No {table} row with id {row_id}")
            for key, value in patch.items():
                setattr(record, key, value)
            session.commit()
            # Pick up the re-joined employee after an employee_id change
            session.refresh(record)
            logger.info("Updated %s row %s", table, row_id)
            return record.to_dict()
        except SQLAlchemyError as e:
            session.rollback()
            raise self._translate(e, table, "update") from e
        finally:
            session.close()

    def delete_by_id(self, table, row_id):
        model = self._model(table)
        session = self.get_session()
        try:
            record = session.query(model).filter_by(id=row_id).first()
            if record is None:
                return False
            session.delete(record)
            session.commit()
            logger.info("Deleted %s row %s", table, row_id)
            return True
        except SQLAlchemyError as e:
            session.rollback()
            raise self._translate(e, table, "delete") from e
        finally:
            session.close()
