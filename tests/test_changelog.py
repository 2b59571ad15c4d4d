import os

from eventos import __version__


def _changelog_lines():
    root = os.path.dirname(os.path.dirname(__file__))
    changelog = os.path.join(root, "CHANGELOG.md")
    assert os.path.exists(changelog), "CHANGELOG.md should exist"
    with open(changelog, encoding="utf-8") as f:
        return f.readlines()


def test_changelog_has_entries():
    entries = [line for line in _changelog_lines() if line.strip().startswith("- ")]
    assert entries, "CHANGELOG.md should contain at least one bullet entry"


def test_latest_release_matches_package_version():
    headings = [line.strip()[3:] for line in _changelog_lines() if line.startswith("## ")]
    assert headings, "CHANGELOG.md should have a release heading"
    assert headings[0] == __version__
