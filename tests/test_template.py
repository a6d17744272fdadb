"""Tests for target URL templates and the default URL resolver."""

import unittest

from release_publisher._upload import TargetConfig, TemplateTargetURLResolver
from release_publisher.artifact import Artifact, ArtifactType
from release_publisher.context import RunContext
from release_publisher.exceptions import TemplateError
from release_publisher.template import TemplateRenderer


class TestTemplateRenderer(unittest.TestCase):
    """Tests for TemplateRenderer."""

    def setUp(self):
        self.ctx = RunContext(project_name="app", version="1.0.0", tag="v1.0.0", env={"REPO": "stable"})
        self.artifact = Artifact(
            name="app_1.0.0_linux_amd64.tar.gz",
            path="dist/app_1.0.0_linux_amd64.tar.gz",
            type=ArtifactType.UPLOADABLE_ARCHIVE,
            id="cli",
            os="linux",
            arch="amd64",
        )

    def test_run_fields(self):
        rendered = TemplateRenderer(self.ctx).apply("https://x/{{ .ProjectName }}/{{.Version}}/{{ .Tag }}")
        self.assertEqual(rendered, "https://x/app/1.0.0/v1.0.0")

    def test_artifact_fields(self):
        rendered = (
            TemplateRenderer(self.ctx)
            .with_artifact(self.artifact)
            .apply("{{ .Os }}/{{ .Arch }}/{{ .ArtifactID }}/{{ .ArtifactName }}")
        )
        self.assertEqual(rendered, "linux/amd64/cli/app_1.0.0_linux_amd64.tar.gz")

    def test_replacements(self):
        rendered = TemplateRenderer(self.ctx).with_artifact(self.artifact, {"amd64": "x86_64"}).apply("{{ .Arch }}")
        self.assertEqual(rendered, "x86_64")

    def test_env_field(self):
        self.assertEqual(TemplateRenderer(self.ctx).apply("https://x/{{ .Env.REPO }}"), "https://x/stable")

    def test_missing_env_raises(self):
        with self.assertRaises(TemplateError):
            TemplateRenderer(self.ctx).apply("{{ .Env.NOPE }}")

    def test_unknown_field_raises(self):
        with self.assertRaises(TemplateError) as ctx:
            TemplateRenderer(self.ctx).apply("https://x/{{ .Nope }}")
        self.assertIn(".Nope", str(ctx.exception))

    def test_artifact_field_without_artifact_raises(self):
        with self.assertRaises(TemplateError):
            TemplateRenderer(self.ctx).apply("{{ .Os }}")

    def test_malformed_placeholder_raises(self):
        with self.assertRaises(TemplateError) as ctx:
            TemplateRenderer(self.ctx).apply("https://x/{{ .Version")
        self.assertIn("malformed placeholder", str(ctx.exception))

    def test_braces_in_values_allowed(self):
        ctx = RunContext(version="{{x}}", env={"REPO": "a}}b"})
        rendered = TemplateRenderer(ctx).apply("https://x/{{ .Version }}/{{ .Env.REPO }}")
        self.assertEqual(rendered, "https://x/{{x}}/a}}b")

    def test_stray_closing_braces_raise(self):
        with self.assertRaises(TemplateError):
            TemplateRenderer(self.ctx).apply("https://x/{{ .Version }}/}}")

    def test_plain_url_unchanged(self):
        self.assertEqual(TemplateRenderer(self.ctx).apply("https://example.com/up"), "https://example.com/up")


class TestTemplateTargetURLResolver(unittest.TestCase):
    """Tests for the default target URL resolver."""

    def setUp(self):
        self.ctx = RunContext(project_name="app", version="1.0", archive_replacements={"linux": "Linux"})
        self.resolver = TemplateTargetURLResolver()
        self.artifact = Artifact(
            name="app_1.0_linux_amd64.tar.gz",
            path="dist/app_1.0_linux_amd64.tar.gz",
            type=ArtifactType.UPLOADABLE_ARCHIVE,
            os="linux",
            arch="amd64",
        )

    def test_appends_artifact_name(self):
        config = TargetConfig(name="x", target="https://example.com/up", mode="archive")
        self.assertEqual(
            self.resolver(self.ctx, config, self.artifact),
            "https://example.com/up/app_1.0_linux_amd64.tar.gz",
        )

    def test_no_double_slash(self):
        config = TargetConfig(name="x", target="https://example.com/up/", mode="archive")
        self.assertEqual(
            self.resolver(self.ctx, config, self.artifact),
            "https://example.com/up/app_1.0_linux_amd64.tar.gz",
        )

    def test_custom_artifact_name_leaves_target_unmodified(self):
        config = TargetConfig(name="x", target="https://example.com/up", mode="archive", custom_artifact_name=True)
        self.assertEqual(self.resolver(self.ctx, config, self.artifact), "https://example.com/up")

    def test_replacements_only_in_binary_mode(self):
        template = "https://example.com/{{ .Os }}"
        archive = TargetConfig(name="x", target=template, mode="archive", custom_artifact_name=True)
        binary = TargetConfig(name="x", target=template, mode="binary", custom_artifact_name=True)
        self.assertEqual(self.resolver(self.ctx, archive, self.artifact), "https://example.com/linux")
        self.assertEqual(self.resolver(self.ctx, binary, self.artifact), "https://example.com/Linux")

    def test_template_error_propagates(self):
        config = TargetConfig(name="x", target="https://example.com/{{ .Nope }}", mode="archive")
        with self.assertRaises(TemplateError):
            self.resolver(self.ctx, config, self.artifact)


if __name__ == "__main__":
    unittest.main()
