from core.discovery import get_connected_devices, get_fastboot_devices, parse_device_list

from conftest import FakeAdbClient, failed


def test_adb_listing_skips_header():
    output = "List of devices attached\nemulator-5554\tdevice\nR58M123ABC\tdevice\n\n"
    assert parse_device_list(output) == ["emulator-5554", "R58M123ABC"]


def test_lines_without_tab_are_ignored():
    output = "List of devices attached\n* daemon started successfully\nABC\tunauthorized\n   \n"
    assert parse_device_list(output) == ["ABC"]


def test_duplicates_are_kept_in_order():
    output = "List of devices attached\nB\tdevice\nA\tdevice\nB\tdevice\n"
    assert parse_device_list(output) == ["B", "A", "B"]


def test_fastboot_listing_has_no_header():
    output = "0123456789ABCDEF\tfastboot\nXYZ\tfastboot\n"
    assert parse_device_list(output, skip_header=False) == ["0123456789ABCDEF", "XYZ"]


def test_header_only_output_is_empty():
    assert parse_device_list("List of devices attached\n") == []
    assert parse_device_list("") == []


def test_get_connected_devices_uses_adb():
    client = FakeAdbClient({("adb", "devices"): "List of devices attached\nABC\tdevice\n"})
    assert get_connected_devices(client) == ["ABC"]


def test_get_fastboot_devices_uses_fastboot():
    client = FakeAdbClient({("fastboot", "devices"): "ABC\tfastboot\n"})
    assert get_fastboot_devices(client) == ["ABC"]


def test_failed_listing_returns_empty():
    client = FakeAdbClient(default=failed("cannot connect to daemon"))
    assert get_connected_devices(client) == []
    assert get_fastboot_devices(client) == []
