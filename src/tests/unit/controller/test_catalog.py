"""Unit tests for the static service catalog."""

import pytest

from userbroker.controller.catalog import get_catalog, resolve_service_type
from userbroker.core.errors import InvalidRequestError
from userbroker.core.models import ServiceType


def test_every_service_has_a_plan() -> None:
    catalog = get_catalog()

    assert len(catalog.services) == 4
    assert all(service.plans for service in catalog.services)
    assert len({service.id for service in catalog.services}) == 4


@pytest.mark.parametrize(
    ("service_id", "service_type"),
    [
        ("4f6e6cf6-ffdd-425f-a2c7-3c9258ad2468", ServiceType.USER_PROVIDED),
        ("a2f1b1c4-5e3c-4b1e-9d7e-0f6a3c2d8e11", ServiceType.DATABASE_POD),
        ("5b9e8d27-3f41-4c6a-a1d2-7e0c9b4f6a53", ServiceType.NGINX_POD),
        ("d83c6f10-7a2e-4b95-8c1f-4e6a0d9b2c86", ServiceType.HEKETI_POD),
    ],
)
def test_resolve_service_type(service_id: str, service_type: ServiceType) -> None:
    assert resolve_service_type(service_id) == service_type


def test_resolve_unknown_service() -> None:
    with pytest.raises(InvalidRequestError, match="unknown service_id"):
        resolve_service_type("not-a-service")
