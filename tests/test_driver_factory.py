import pytest

from tests.common import make_location, make_settings, make_stub_driver
from visitor_location.drivers.factory import DriverFactory
from visitor_location.drivers.ip_api_co import IpApiCo
from visitor_location.drivers.ip_api_com import IpApiCom
from visitor_location.drivers.maxmind import MaxMind
from visitor_location.errors import DriverNotFoundError


@pytest.mark.parametrize(("name", "driver_cls"), [("IpApiCo", IpApiCo), ("IpApiCom", IpApiCom), ("MaxMind", MaxMind)])
def test_create_bundled_drivers(name: str, driver_cls: type) -> None:
    factory = DriverFactory(make_settings())
    assert isinstance(factory.create(name), driver_cls)


def test_driver_names_are_case_sensitive() -> None:
    factory = DriverFactory(make_settings())

    with pytest.raises(DriverNotFoundError) as exc_info:
        factory.create("ipapico")

    assert exc_info.value.driver == "ipapico"


def test_unknown_driver_raises() -> None:
    with pytest.raises(DriverNotFoundError, match="Telize"):
        DriverFactory(make_settings()).create("Telize")


def test_name_is_composed_with_configured_namespace() -> None:
    driver_cls = make_stub_driver("Custom", make_location())
    factory = DriverFactory(make_settings(driver_namespace="acme.location."), registry={})
    factory.register("Custom", driver_cls, namespace="other.")

    with pytest.raises(DriverNotFoundError):
        factory.create("Custom")

    factory.register("Custom", driver_cls)
    assert isinstance(factory.create("Custom"), driver_cls)


def test_bundled_drivers_are_not_found_under_a_different_namespace() -> None:
    factory = DriverFactory(make_settings(driver_namespace="acme.location."))

    with pytest.raises(DriverNotFoundError):
        factory.create("IpApiCo")


def test_create_passes_settings_to_driver() -> None:
    settings = make_settings(ipapi_co_base_url="https://example.test/")
    driver = DriverFactory(settings).create("IpApiCo")

    assert driver._base_url == "https://example.test"
