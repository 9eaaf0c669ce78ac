"""DeviceContext: drafts are visible only to the device that opened them."""

import pytest

from app.security.device_context import DeviceContext
from app.security.exceptions import DeviceOwnershipError


def test_same_device_allowed():
    DeviceContext.validate_access("kiosk-1", "kiosk-1")


def test_other_device_rejected():
    with pytest.raises(DeviceOwnershipError) as exc_info:
        DeviceContext.validate_access("kiosk-1", "kiosk-2")
    assert "another device" in exc_info.value.message


@pytest.mark.parametrize("owner,requester", [("", "kiosk-1"), ("kiosk-1", "")])
def test_empty_device_rejected(owner, requester):
    with pytest.raises(DeviceOwnershipError):
        DeviceContext.validate_access(owner, requester)
