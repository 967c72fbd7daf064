"""Tests for the Pointer value object."""

import dataclasses
import unittest

from vc_unified.common.pointer import Pointer, PointerType
from vc_unified.exceptions import ConfigurationError


class TestPointer(unittest.TestCase):
    def test_defaults_to_branch(self) -> None:
        pointer = Pointer("feature1")
        self.assertEqual(pointer.type, PointerType.BRANCH)
        self.assertEqual(pointer.name, "feature1")

    def test_factories(self) -> None:
        self.assertEqual(Pointer.branch("b1"), Pointer("b1", PointerType.BRANCH))
        self.assertEqual(Pointer.tag("1.0"), Pointer("1.0", PointerType.TAG))
        self.assertEqual(Pointer.trunk(), Pointer("trunk"))

    def test_is_trunk(self) -> None:
        self.assertTrue(Pointer.trunk().is_trunk)
        self.assertFalse(Pointer.tag("trunk").is_trunk)
        self.assertFalse(Pointer.branch("feature1").is_trunk)

    def test_empty_name_raises(self) -> None:
        with self.assertRaises(ConfigurationError):
            Pointer("")
        with self.assertRaises(ConfigurationError):
            Pointer("   ")

    def test_invalid_type_raises(self) -> None:
        with self.assertRaises(ConfigurationError):
            Pointer("trunk", "branch")  # type: ignore[arg-type]

    def test_is_immutable(self) -> None:
        pointer = Pointer.trunk()
        with self.assertRaises(dataclasses.FrozenInstanceError):
            pointer.name = "other"  # type: ignore[misc]

    def test_str(self) -> None:
        self.assertEqual(str(Pointer.tag("v1")), "tag:v1")


if __name__ == "__main__":
    unittest.main()
