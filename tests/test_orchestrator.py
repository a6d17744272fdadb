"""Tests for the upload orchestrator."""

import threading
import time
import unittest
from unittest.mock import MagicMock, Mock

from release_publisher._upload import (
    Asset,
    FailureKind,
    TargetConfig,
    UploadOrchestrator,
    check_status_code,
    upload,
)
from release_publisher.artifact import Artifact, ArtifactInventory, ArtifactType
from release_publisher.context import RunContext
from release_publisher.exceptions import ConfigurationError, PublishingDisabledError, UploadError

ENV = {
    "UPLOAD_FIRST_USERNAME": "u",
    "UPLOAD_FIRST_SECRET": "s",
    "UPLOAD_SECOND_USERNAME": "u",
    "UPLOAD_SECOND_SECRET": "s",
}


class _TrackingOpener:
    """Asset opener returning in-memory assets and remembering them."""

    def __init__(self):
        self._lock = threading.Lock()
        self.assets = []

    def __call__(self, kind, artifact):
        asset = Asset(stream=MagicMock(), size=1)
        with self._lock:
            self.assets.append(asset)
        return asset


def _response(status_code):
    response = Mock()
    response.status_code = status_code
    response.reason = "OK" if status_code < 400 else "Internal Server Error"
    return response


def _archives(count):
    return [
        Artifact(name=f"app_{i}.tar.gz", path=f"dist/app_{i}.tar.gz", type=ArtifactType.UPLOADABLE_ARCHIVE)
        for i in range(count)
    ]


class OrchestratorTestCase(unittest.TestCase):
    """Shared setup with a recording session."""

    def setUp(self):
        self.inventory = ArtifactInventory()
        self.ctx = RunContext(artifacts=self.inventory, env=dict(ENV), parallelism=2)
        self.requested = []
        self.failing_urls = set()
        self._lock = threading.Lock()
        self.session = Mock()
        self.session.request.side_effect = self._request
        self.opener = _TrackingOpener()

    def _request(self, method, url, **kwargs):
        with self._lock:
            self.requested.append(url)
        return _response(500 if url in self.failing_urls else 201)

    def _orchestrator(self):
        return UploadOrchestrator(
            self.ctx,
            "upload",
            check_status_code,
            asset_opener=self.opener,
            client_factory=lambda config: self.session,
        )

    @staticmethod
    def _config(name, **kwargs):
        return TargetConfig(name=name, target=f"https://{name}.example.com", **kwargs).with_defaults()


class TestPublish(OrchestratorTestCase):
    """Tests for UploadOrchestrator.publish."""

    def test_skip_publish(self):
        self.ctx.skip_publish = True
        for artifact in _archives(2):
            self.inventory.add(artifact)

        with self.assertRaises(PublishingDisabledError):
            self._orchestrator().publish([self._config("first")])
        self.assertEqual(self.requested, [])

    def test_uploads_selected_artifacts_only(self):
        archive = Artifact(name="app.tar.gz", path="dist/app.tar.gz", type=ArtifactType.UPLOADABLE_ARCHIVE)
        self.inventory.add(Artifact(name="app", path="dist/app", type=ArtifactType.UPLOADABLE_BINARY))
        self.inventory.add(archive)
        self.inventory.add(Artifact(name="checksums.txt", path="dist/checksums.txt", type=ArtifactType.CHECKSUM))

        results = self._orchestrator().publish([self._config("first")])

        self.assertEqual(self.requested, ["https://first.example.com/app.tar.gz"])
        self.assertEqual([r.artifact_name for r in results], ["app.tar.gz"])
        self.assertTrue(results[0].success)

    def test_no_matching_artifacts(self):
        self.inventory.add(Artifact(name="app", path="dist/app", type=ArtifactType.UPLOADABLE_BINARY))
        self.assertEqual(self._orchestrator().publish([self._config("first")]), [])

    def test_one_failure_every_upload_attempted(self):
        for artifact in _archives(5):
            self.inventory.add(artifact)
        self.failing_urls.add("https://first.example.com/app_2.tar.gz")
        orchestrator = self._orchestrator()

        with self.assertRaises(UploadError) as ctx:
            orchestrator.publish([self._config("first")])

        self.assertIn("app_2.tar.gz", str(ctx.exception))
        self.assertEqual(len(self.requested), 5)
        results = orchestrator.results
        self.assertEqual(len(results), 5)
        self.assertEqual([r.artifact_name for r in results if not r.success], ["app_2.tar.gz"])
        self.assertEqual(len(self.opener.assets), 5)
        for asset in self.opener.assets:
            asset.stream.close.assert_called_once()

    def test_failed_target_stops_later_targets(self):
        for artifact in _archives(2):
            self.inventory.add(artifact)
        self.failing_urls.add("https://first.example.com/app_0.tar.gz")

        with self.assertRaises(UploadError):
            self._orchestrator().publish([self._config("first"), self._config("second")])

        self.assertTrue(all(url.startswith("https://first.") for url in self.requested))

    def test_targets_processed_in_order(self):
        for artifact in _archives(3):
            self.inventory.add(artifact)

        self._orchestrator().publish([self._config("first"), self._config("second")])

        self.assertEqual(len(self.requested), 6)
        self.assertTrue(all(url.startswith("https://first.") for url in self.requested[:3]))
        self.assertTrue(all(url.startswith("https://second.") for url in self.requested[3:]))

    def test_invalid_mode_aborts_before_any_upload(self):
        """Test a bad mode on a later target stops the run before the first request."""
        for artifact in _archives(2):
            self.inventory.add(artifact)
        bad = TargetConfig(name="second", target="https://second.example.com", mode="everything", method="PUT")

        with self.assertRaises(ConfigurationError):
            self._orchestrator().publish([self._config("first"), bad])
        self.assertEqual(self.requested, [])

    def test_parallelism_bound(self):
        for artifact in _archives(8):
            self.inventory.add(artifact)
        current = 0
        peak = 0
        lock = threading.Lock()

        def slow_request(method, url, **kwargs):
            nonlocal current, peak
            with lock:
                current += 1
                peak = max(peak, current)
            time.sleep(0.02)
            with lock:
                current -= 1
            return _response(201)

        self.session.request.side_effect = slow_request
        results = self._orchestrator().publish([self._config("first")])

        self.assertEqual(len(results), 8)
        self.assertLessEqual(peak, 2)

    def test_id_filter(self):
        self.inventory.add(
            Artifact(name="cli.tar.gz", path="dist/cli.tar.gz", type=ArtifactType.UPLOADABLE_ARCHIVE, id="cli")
        )
        self.inventory.add(
            Artifact(name="srv.tar.gz", path="dist/srv.tar.gz", type=ArtifactType.UPLOADABLE_ARCHIVE, id="srv")
        )

        self._orchestrator().publish([self._config("first", ids=("srv",))])

        self.assertEqual(self.requested, ["https://first.example.com/srv.tar.gz"])


class TestCancellation(OrchestratorTestCase):
    """Tests for uploads queued after the run is cancelled."""

    def test_cancelled_run_records_every_upload(self):
        for artifact in _archives(3):
            self.inventory.add(artifact)
        self.ctx.parallelism = 1
        self.ctx.cancel()
        orchestrator = self._orchestrator()

        with self.assertRaises(UploadError) as ctx:
            orchestrator.publish([self._config("first")])

        self.assertIn("upload: upload failed: upload cancelled", str(ctx.exception))
        self.assertIn("instance=first", str(ctx.exception))
        results = orchestrator.results
        self.assertEqual(len(results), 3)
        self.assertTrue(all(r.failure == FailureKind.CANCELLED for r in results))
        self.assertEqual(self.requested, [])
        self.assertEqual(self.opener.assets, [])

    def test_cancel_mid_batch_stops_queued_uploads(self):
        for artifact in _archives(4):
            self.inventory.add(artifact)
        self.ctx.parallelism = 1

        def cancel_after_first(method, url, **kwargs):
            with self._lock:
                self.requested.append(url)
            self.ctx.cancel()
            return _response(201)

        self.session.request.side_effect = cancel_after_first
        orchestrator = self._orchestrator()

        with self.assertRaises(UploadError):
            orchestrator.publish([self._config("first")])

        self.assertEqual(self.requested, ["https://first.example.com/app_0.tar.gz"])
        results = orchestrator.results
        self.assertEqual(len(results), 4)
        self.assertTrue(results[0].success)
        self.assertEqual([r.failure for r in results[1:]], [FailureKind.CANCELLED] * 3)


class TestTargetSessions(OrchestratorTestCase):
    """Tests for the HTTP session shared by a target's uploads."""

    def _session_factory(self):
        sessions = []

        def factory(config):
            session = Mock()
            session.request.side_effect = self._request
            sessions.append(session)
            return session

        return factory, sessions

    def test_one_session_per_target_closed_after_batch(self):
        for artifact in _archives(3):
            self.inventory.add(artifact)
        factory, sessions = self._session_factory()
        orchestrator = UploadOrchestrator(
            self.ctx, "upload", check_status_code, asset_opener=self.opener, client_factory=factory
        )

        orchestrator.publish([self._config("first"), self._config("second")])

        self.assertEqual(len(sessions), 2)
        for session in sessions:
            self.assertEqual(session.request.call_count, 3)
            session.close.assert_called_once()

    def test_session_closed_when_target_fails(self):
        for artifact in _archives(2):
            self.inventory.add(artifact)
        self.failing_urls.add("https://first.example.com/app_1.tar.gz")
        factory, sessions = self._session_factory()
        orchestrator = UploadOrchestrator(
            self.ctx, "upload", check_status_code, asset_opener=self.opener, client_factory=factory
        )

        with self.assertRaises(UploadError):
            orchestrator.publish([self._config("first"), self._config("second")])

        self.assertEqual(len(sessions), 1)
        sessions[0].close.assert_called_once()

    def test_no_session_without_artifacts(self):
        factory = Mock()
        orchestrator = UploadOrchestrator(
            self.ctx, "upload", check_status_code, asset_opener=self.opener, client_factory=factory
        )

        orchestrator.publish([self._config("first")])

        factory.assert_not_called()

    def test_factory_failure_reported_per_upload(self):
        for artifact in _archives(2):
            self.inventory.add(artifact)

        def broken_factory(config):
            raise ValueError("bad certificates")

        orchestrator = UploadOrchestrator(
            self.ctx, "upload", check_status_code, asset_opener=self.opener, client_factory=broken_factory
        )

        with self.assertRaises(UploadError) as ctx:
            orchestrator.publish([self._config("first")])

        self.assertIn("bad certificates", str(ctx.exception))
        self.assertEqual([r.failure for r in orchestrator.results], [FailureKind.TRANSPORT] * 2)


class TestUploadFunction(unittest.TestCase):
    """Tests for the module-level upload shorthand."""

    def test_empty_inventory(self):
        ctx = RunContext(env=dict(ENV))
        config = TargetConfig(name="first", target="https://first.example.com").with_defaults()
        self.assertEqual(upload(ctx, [config], "upload", check_status_code), [])

    def test_skip_publish(self):
        ctx = RunContext(skip_publish=True)
        with self.assertRaises(PublishingDisabledError):
            upload(ctx, [], "upload", check_status_code)


if __name__ == "__main__":
    unittest.main()
