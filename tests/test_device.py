"""Tests for the device identifier provider."""

import time
from concurrent.futures import ThreadPoolExecutor
from unittest.mock import patch
from uuid import uuid4

from proxynode.utils.device import UNKNOWN_DEVICE_ID, DeviceIdProvider


class TestDeviceIdProvider:
    """Test suite for DeviceIdProvider."""

    def test_creates_and_reuses_id(self, tmp_path):
        """Test that the id is generated once and persisted."""
        path = tmp_path / "state" / "device_id"

        first = DeviceIdProvider(path=path).device_id
        second = DeviceIdProvider(path=path).device_id

        assert first == second
        assert path.read_text(encoding="utf-8") == first

    def test_cached_per_instance(self, tmp_path):
        provider = DeviceIdProvider(path=tmp_path / "device_id")

        first = provider.device_id
        (tmp_path / "device_id").write_text("changed", encoding="utf-8")

        assert provider.device_id == first

    def test_fixed_id(self, tmp_path):
        path = tmp_path / "device_id"

        assert DeviceIdProvider(path=path, device_id="kiosk-1").device_id == "kiosk-1"
        assert not path.exists()

    def test_unreadable_storage_falls_back(self, tmp_path):
        """Test that I/O failures yield the unknown-device sentinel."""
        provider = DeviceIdProvider(path=tmp_path / "device_id")

        with patch.object(DeviceIdProvider, "_read_or_create", side_effect=OSError("denied")):
            assert provider.device_id == UNKNOWN_DEVICE_ID

    def test_concurrent_first_access_yields_one_id(self, tmp_path):
        """Test that threads racing on a fresh device agree on one id."""
        provider = DeviceIdProvider(path=tmp_path / "device_id")

        def slow_uuid():
            time.sleep(0.05)
            return uuid4()

        with patch("proxynode.utils.device.uuid4", side_effect=slow_uuid):
            with ThreadPoolExecutor(max_workers=4) as pool:
                ids = list(pool.map(lambda _: provider.device_id, range(4)))

        assert len(set(ids)) == 1
        assert (tmp_path / "device_id").read_text(encoding="utf-8") == ids[0]

    def test_providers_sharing_a_file_agree(self, tmp_path):
        """Test that separate providers on one path never overwrite each other."""
        path = tmp_path / "device_id"
        providers = [DeviceIdProvider(path=path) for _ in range(4)]

        def slow_uuid():
            time.sleep(0.05)
            return uuid4()

        with patch("proxynode.utils.device.uuid4", side_effect=slow_uuid):
            with ThreadPoolExecutor(max_workers=4) as pool:
                ids = list(pool.map(lambda p: p.device_id, providers))

        assert len(set(ids)) == 1
        assert path.read_text(encoding="utf-8") == ids[0]
