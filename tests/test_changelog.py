import os
import sys

sys.path.insert(0, os.path.dirname(os.path.dirname(__file__)))

import homeopt

ROOT = os.path.dirname(os.path.dirname(__file__))


def _changelog_lines():
    with open(os.path.join(ROOT, "CHANGELOG.md")) as f:
        return [line.rstrip("\n") for line in f]


def test_latest_release_matches_package_version():
    releases = [line[3:].strip() for line in _changelog_lines() if line.startswith("## ")]
    assert releases, "CHANGELOG.md should list at least one release"
    assert releases[0] == homeopt.__version__


def test_latest_release_has_notes():
    lines = _changelog_lines()
    start = next(i for i, line in enumerate(lines) if line.startswith("## "))
    notes = []
    for line in lines[start + 1:]:
        if line.startswith("## "):
            break
        if line.startswith("- "):
            notes.append(line)
    assert notes
