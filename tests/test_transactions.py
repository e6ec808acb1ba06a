import pytest
from sqlalchemy.exc import SQLAlchemyError

from buildbooks.core.exceptions import NotFoundError, TransactionFailure
from buildbooks.models import Vendor
from buildbooks.utils.transactions import unit_of_work


def test_commits_on_success(db_session):
    with unit_of_work(db_session, "Vendor create failed"):
        db_session.add(Vendor(name="Amreli Steel"))

    db_session.expire_all()
    assert db_session.query(Vendor).count() == 1


@pytest.mark.parametrize(
    "error, expected",
    [
        (NotFoundError("Project", "PRJ-MISSING"), NotFoundError),
        (SQLAlchemyError("connection lost"), TransactionFailure),
        (RuntimeError("unexpected"), RuntimeError),
    ],
)
def test_any_error_rolls_back_flushed_rows(db_session, error, expected):
    with pytest.raises(expected):
        with unit_of_work(db_session, "Vendor create failed"):
            db_session.add(Vendor(name="Amreli Steel"))
            db_session.flush()
            raise error

    assert db_session.query(Vendor).count() == 0
