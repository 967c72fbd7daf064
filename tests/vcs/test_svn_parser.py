"""Tests for the Subversion XML output parser."""

import unittest
from datetime import timezone

from vc_unified.common.models import FileInfo, FileKind, Status
from vc_unified.vcs.svn_parser import SvnParser, parse_svn_date

LIST_XML = """<?xml version="1.0" encoding="UTF-8"?>
<lists>
<list path="svn://example.com/repo/trunk">
<entry kind="file">
<name>README.md</name>
<size>42</size>
<commit revision="7"><author>alice</author><date>2013-01-02T10:00:00.000000Z</date></commit>
</entry>
<entry kind="dir">
<name>src</name>
<commit revision="5"><author>bob</author><date>2013-01-01T10:00:00.000000Z</date></commit>
</entry>
</list>
</lists>
"""

LOG_XML = """<?xml version="1.0" encoding="UTF-8"?>
<log>
<logentry revision="7">
<author>alice</author>
<date>2013-01-02T10:00:00.123456Z</date>
<paths>
<path action="M" prop-mods="false" text-mods="true" kind="file">/trunk/README.md</path>
</paths>
<msg>Update readme
</msg>
</logentry>
<logentry revision="1">
<date>2013-01-01T09:00:00.000000Z</date>
<msg>Initial import</msg>
</logentry>
</log>
"""

STATUS_XML = """<?xml version="1.0" encoding="UTF-8"?>
<status>
<target path=".">
<entry path="statustest1"><wc-status item="unversioned" props="none"></wc-status></entry>
<entry path="new.txt"><wc-status item="added" props="none" revision="-1"></wc-status></entry>
<entry path="README.md"><wc-status item="modified" props="none" revision="7"><commit revision="7"/></wc-status></entry>
<entry path="props.txt"><wc-status item="normal" props="modified" revision="7"></wc-status></entry>
<entry path="clean.txt"><wc-status item="normal" props="none" revision="7"></wc-status></entry>
<entry path="sub\\gone.txt"><wc-status item="deleted" props="none" revision="7"></wc-status></entry>
</target>
</status>
"""

DIFF_XML = """<?xml version="1.0" encoding="UTF-8"?>
<diff>
<paths>
<path item="modified" props="none" kind="file">svn://example.com/repo/trunk/README.md</path>
<path item="added" props="none" kind="dir">svn://example.com/repo/trunk/new%20dir</path>
<path item="none" props="none" kind="file">svn://example.com/repo/trunk/same.txt</path>
</paths>
</diff>
"""


class TestSvnParser(unittest.TestCase):
    def setUp(self) -> None:
        self.parser = SvnParser()

    def test_parse_listing(self) -> None:
        entries = self.parser.parse_listing(LIST_XML)
        self.assertEqual(entries, [FileInfo("README.md", FileKind.FILE), FileInfo("src", FileKind.DIR)])
        self.assertEqual(entries[0].revision, "7")

    def test_parse_log(self) -> None:
        commits = self.parser.parse_log(LOG_XML)
        self.assertEqual([c.revision for c in commits], ["7", "1"])
        self.assertEqual(commits[0].author, "alice")
        self.assertEqual(commits[0].message, "Update readme")
        self.assertEqual(commits[0].changed_paths, ("/trunk/README.md",))
        self.assertEqual(commits[0].date.tzinfo, timezone.utc)
        self.assertEqual(commits[1].author, "")

    def test_parse_status(self) -> None:
        entries = self.parser.parse_status(STATUS_XML)
        self.assertEqual(
            entries,
            [
                FileInfo("statustest1", FileKind.FILE, None, Status.UNVERSIONED),
                FileInfo("new.txt", FileKind.FILE, None, Status.ADDED),
                FileInfo("README.md", FileKind.FILE, None, Status.MODIFIED),
                FileInfo("props.txt", FileKind.FILE, None, Status.MODIFIED),
                FileInfo("sub/gone.txt", FileKind.FILE, None, Status.DELETED),
            ],
        )

    def test_parse_status_detects_directories(self) -> None:
        import tempfile
        from pathlib import Path

        with tempfile.TemporaryDirectory() as tmp:
            (Path(tmp) / "newdir").mkdir()
            raw = (
                '<status><target path="."><entry path="newdir">'
                '<wc-status item="unversioned" props="none"/></entry></target></status>'
            )
            entries = self.parser.parse_status(raw, base_dir=Path(tmp))
        self.assertEqual(entries, [FileInfo("newdir", FileKind.DIR, None, Status.UNVERSIONED)])

    def test_parse_diff_relative_to_base(self) -> None:
        entries = self.parser.parse_diff(DIFF_XML, base="svn://example.com/repo/trunk")
        self.assertEqual(
            entries,
            [
                FileInfo("README.md", FileKind.FILE, None, Status.MODIFIED),
                FileInfo("new dir", FileKind.DIR, None, Status.ADDED),
            ],
        )

    def test_parse_diff_base_must_match_whole_segment(self) -> None:
        raw = '<diff><paths><path item="deleted" kind="file">svn://x/trunk2/a</path></paths></diff>'
        entries = self.parser.parse_diff(raw, base="svn://x/trunk")
        self.assertEqual(entries[0].name, "svn://x/trunk2/a")

    def test_parse_refs(self) -> None:
        self.assertEqual(self.parser.parse_refs(LIST_XML), ["src"])

    def test_empty_and_malformed_output(self) -> None:
        self.assertEqual(self.parser.parse_listing(""), [])
        self.assertEqual(self.parser.parse_log("not xml <"), [])
        self.assertEqual(self.parser.parse_status("   \n"), [])

    def test_unknown_elements_are_ignored(self) -> None:
        raw = "<lists><list><entry kind='file'></entry><other/></list></lists>"
        self.assertEqual(self.parser.parse_listing(raw), [])


class TestParseSvnDate(unittest.TestCase):
    def test_valid(self) -> None:
        value = parse_svn_date("2013-01-02T10:00:00.123456Z")
        self.assertEqual((value.year, value.microsecond), (2013, 123456))

    def test_invalid(self) -> None:
        self.assertIsNone(parse_svn_date("yesterday"))
        self.assertIsNone(parse_svn_date(None))


if __name__ == "__main__":
    unittest.main()
