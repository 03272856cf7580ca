import contextlib
import io
import os
import tempfile
import unittest

from fakes import PHOTOS, FakeProvider, sized
from test_azurexml import FakeOpener

from blobboss import config
from blobboss.cli import main, make_provider_factory, parse_args
from blobboss.providers.azurexml import AzureXMLProvider


class CliTests(unittest.TestCase):
    def setUp(self):
        self.tmpdir = tempfile.TemporaryDirectory()
        self.addCleanup(self.tmpdir.cleanup)
        self.config_path = os.path.join(self.tmpdir.name, "missing.json")
        self.provider = FakeProvider({"media": sized(PHOTOS), "logs": {"a.log": b"hello"}}, account="acct")
        self.accounts = []

    def _factory(self, account):
        self.accounts.append(account)
        return self.provider

    def run_cli(self, *argv):
        out = io.StringIO()
        err = io.StringIO()
        with contextlib.redirect_stderr(err):
            code = main(["--config", self.config_path, *argv], provider_factory=self._factory, out=out)
        return code, out.getvalue(), err.getvalue()

    def test_ls_directory_pattern(self):
        code, out, _ = self.run_cli("ls", "az://acct/media/photos/*/")
        self.assertEqual(code, 0)
        self.assertEqual(
            out,
            "Contents of az://acct/media:\n"
            "az://acct/media/photos/2023/\n"
            "az://acct/media/photos/2024/\n",
        )

    def test_ls_recursive_wildcard(self):
        code, out, _ = self.run_cli("ls", "az://acct/media/photos/**/*.jpg")
        self.assertEqual(code, 0)
        self.assertEqual(out.count("az://acct/media/photos/20"), 3)

    def test_ls_long_listing(self):
        code, out, _ = self.run_cli("ls", "-l", "-H", "az://acct/media/photos/2024/")
        self.assertEqual(code, 0)
        lines = out.splitlines()
        self.assertEqual(lines[0], "Contents of az://acct/media:")
        self.assertTrue(lines[1].startswith("Size"))
        self.assertTrue(lines[2].startswith("100 B"))
        self.assertTrue(lines[2].endswith("az://acct/media/photos/2024/a.jpg"))

    def test_ls_no_matches(self):
        code, out, _ = self.run_cli("ls", "az://acct/media/photos/*.png")
        self.assertEqual(code, 0)
        self.assertEqual(out, "No objects matching pattern in az://acct/media/\n")

    def test_ls_empty_prefix(self):
        code, out, _ = self.run_cli("ls", "az://acct/media/videos/")
        self.assertEqual(code, 0)
        self.assertEqual(out, "No objects found in az://acct/media/\n")

    def test_ls_containers(self):
        code, out, _ = self.run_cli("ls", "az://acct/")
        self.assertEqual(code, 0)
        self.assertEqual(out, "Azure Storage Containers:\naz://acct/logs/\naz://acct/media/\n")

    def test_ls_without_path_uses_account_flag(self):
        code, out, _ = self.run_cli("--account", "flagacct", "ls")
        self.assertEqual(code, 0)
        self.assertEqual(self.accounts, ["flagacct"])
        self.assertIn("az://flagacct/media/", out)

    def test_ls_legacy_address_with_command_account(self):
        code, out, _ = self.run_cli("ls", "-a", "cmdacct", "az://Media-Legacy/")
        self.assertEqual(code, 1)
        self.assertEqual(self.accounts, ["cmdacct"])

    def test_missing_account_is_reported(self):
        code, out, err = self.run_cli("ls", "az://my-container/x")
        self.assertEqual(code, 1)
        self.assertIn("Error: Storage account not configured", err)

    def test_invalid_uri_is_reported(self):
        code, _, err = self.run_cli("ls", "az://")
        self.assertEqual(code, 1)
        self.assertTrue(err.startswith("Error: Invalid Azure URI"))

    def test_listing_failure_is_reported(self):
        code, _, err = self.run_cli("ls", "az://acct/missing/")
        self.assertEqual(code, 1)
        self.assertIn("Error: Not found", err)

    def test_du_with_total(self):
        code, out, _ = self.run_cli("du", "az://acct/media/photos/", "-c")
        self.assertEqual(code, 0)
        self.assertEqual(
            out,
            "50\taz://acct/media/photos/2023/\n"
            "300\taz://acct/media/photos/2024/\n"
            "350\taz://acct/media/photos/ (total)\n",
        )

    def test_du_summarize_human_readable(self):
        code, out, _ = self.run_cli("du", "-s", "-H", "az://acct/media/photos/")
        self.assertEqual(code, 0)
        self.assertEqual(out, "350 B\taz://acct/media/photos/\n")

    def test_du_account(self):
        code, out, _ = self.run_cli("du", "az://acct/")
        self.assertEqual(code, 0)
        self.assertEqual(
            out,
            "5\taz://acct/logs/\n"
            "350\taz://acct/media/\n"
            "355\taz://acct/ (total)\n",
        )

    def test_cat_with_range(self):
        buffer = io.BytesIO()
        out = io.TextIOWrapper(buffer)
        with contextlib.redirect_stderr(io.StringIO()):
            code = main(
                ["--config", self.config_path, "cat", "-r", "1-3", "az://acct/logs/a.log"],
                provider_factory=self._factory,
                out=out,
            )
        self.assertEqual(code, 0)
        self.assertEqual(buffer.getvalue(), b"ell")

    def test_cat_bad_range(self):
        code, _, err = self.run_cli("cat", "-r", "-5", "az://acct/logs/a.log")
        self.assertEqual(code, 1)
        self.assertIn("Negative byte range", err)

    def test_local_ls_and_du(self):
        root = self.tmpdir.name
        os.makedirs(os.path.join(root, "sub"))
        with open(os.path.join(root, "sub", "f.bin"), "wb") as f:
            f.write(b"x" * 12)

        code, out, _ = self.run_cli("ls", root)
        self.assertEqual(code, 0)
        self.assertEqual(out, "sub/\n")

        code, out, _ = self.run_cli("ls", "-r", root)
        self.assertEqual(out, "sub/\nsub/f.bin\n")

        code, out, _ = self.run_cli("du", "-s", root)
        self.assertEqual(out, f"12\t{root}\n")

    def test_local_path_missing(self):
        code, _, err = self.run_cli("ls", os.path.join(self.tmpdir.name, "nope"))
        self.assertEqual(code, 1)
        self.assertIn("does not exist", err)

    def test_non_xml_response_reports_an_error(self):
        def factory(account):
            return AzureXMLProvider(account, opener=FakeOpener([b"<html>captive portal"]))

        err = io.StringIO()
        with contextlib.redirect_stderr(err):
            code = main(["--config", self.config_path, "ls", "az://acct/media/"], provider_factory=factory, out=io.StringIO())
        self.assertEqual(code, 1)
        self.assertIn("Error: Unexpected non-XML response", err.getvalue())


class ProviderFactoryTests(unittest.TestCase):
    def test_endpoint_account_placeholder(self):
        factory = make_provider_factory(config.DEFAULT_CONFIG, sas_token="sig=1", endpoint="http://127.0.0.1:10000/{account}")
        provider = factory("devstoreaccount1")
        self.assertEqual(provider.endpoint, "http://127.0.0.1:10000/devstoreaccount1")
        self.assertEqual(provider.sas_token, "sig=1")
        self.assertEqual(provider.page_size, 5000)

    def test_config_values_used_without_flags(self):
        settings = {"general": {"page_size": 100}, "azure": {"sas_token": "sv=x", "endpoint": None}}
        provider = make_provider_factory(settings)("acct")
        self.assertEqual(provider.endpoint, "https://acct.blob.core.windows.net")
        self.assertEqual(provider.sas_token, "sv=x")
        self.assertEqual(provider.page_size, 100)


class ParseArgsTests(unittest.TestCase):
    def test_defaults_to_shell(self):
        args = parse_args([])
        self.assertEqual(args.command, "shell")
        self.assertIsNone(args.address)

    def test_du_flags(self):
        args = parse_args(["du", "-s", "-H", "-c", "az://acct/media/"])
        self.assertTrue(args.summarize and args.human_readable and args.total)


if __name__ == "__main__":
    unittest.main()
