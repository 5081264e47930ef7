from __future__ import annotations

from diskusage.errors import DiskUsageError, EntryAccessError, InvalidArgument


def test_details_are_appended():
    err = DiskUsageError("bad thing", details={"path": "/x", "mode": "tld"})
    assert str(err) == "bad thing (path=/x, mode=tld)"
    assert err.message == "bad thing"


def test_choice_lists_possible_values():
    err = InvalidArgument.choice("sort field", "name", ("files", "size"))
    assert err.message == "Invalid sort field 'name', possible values are 'files, size'"
    assert isinstance(err, DiskUsageError)


def test_entry_access_error_wraps_oserror():
    cause = PermissionError(13, "Permission denied", "/srv/secret")
    err = EntryAccessError("/srv/secret", cause)
    assert err.message == "Permission denied: /srv/secret"
    assert err.details == {"errno": "13"}
    assert err.cause is cause
