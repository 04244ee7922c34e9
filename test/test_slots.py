"""
Slot and cell tests.

Scope
- Slot: buffer validation, reads, writes and clearing over caller memory.
- Cell: the minimal String target.
- writable(): String target detection.
"""
import ctypes
import io
import sys
import unittest
from array import array
from unittest import TestCase

from rich.console import Console

from dryopt.fitting import narrow
from dryopt.slots import *


class SlotTest(TestCase):

    def testSizeFollowsBuffer(self):
        self.assertEqual(Slot(bytearray(4)).size, 4)
        self.assertEqual(Slot(ctypes.c_short()).size, ctypes.sizeof(ctypes.c_short))
        self.assertEqual(Slot(array("i", [0])).size, array("i").itemsize)

    def testWriteGoesToCallerMemory(self):
        target = bytearray(4)
        slot = Slot(target)
        slot.write(b"\x01\x02\x03\x04")
        self.assertEqual(target, bytearray(b"\x01\x02\x03\x04"))
        self.assertEqual(slot.read(), b"\x01\x02\x03\x04")
        self.assertIs(slot.target, target)

    def testWriteIntoCtypesScalar(self):
        target = ctypes.c_int16()
        Slot(target).write(narrow(-5, 2, byteorder=sys.byteorder))
        self.assertEqual(target.value, -5)

    def testWriteRejectsWrongLength(self):
        with self.assertRaises(ValueError):
            Slot(bytearray(2)).write(b"\x00")

    def testClear(self):
        target = bytearray(b"\xff\xff")
        Slot(target).clear()
        self.assertEqual(target, bytearray(2))

    def testRejectsReadOnlyBuffer(self):
        with self.assertRaises(TypeError):
            Slot(b"abc")

    def testRejectsNonBuffer(self):
        with self.assertRaises(TypeError):
            Slot(object())

    def testRejectsNonContiguousBuffer(self):
        with self.assertRaises(TypeError):
            Slot(memoryview(bytearray(8))[::2])

    def testRepr(self):
        self.assertEqual(repr(Slot(bytearray(b"\x01\x02"))), "slot(size=2, data=0102)")


class CellTest(TestCase):

    def testDefaultsToNone(self):
        self.assertIsNone(Cell().value)

    def testEquality(self):
        self.assertEqual(Cell("a"), Cell("a"))
        self.assertNotEqual(Cell("a"), Cell("b"))

    def testUnhashable(self):
        with self.assertRaises(TypeError):
            hash(Cell())

    def testRichRendering(self):
        console = Console(file=io.StringIO(), width=40)
        console.print(Cell("x"))
        self.assertIn("cell('x')", console.file.getvalue())


class WritableTest(TestCase):

    def testAcceptsValueHolders(self):
        self.assertTrue(writable(Cell()))
        self.assertTrue(writable(ctypes.c_wchar_p()))

    def testRejectsOthers(self):
        self.assertFalse(writable(None))
        self.assertFalse(writable("abc"))
        self.assertFalse(writable(bytearray(2)))
        self.assertFalse(writable(object()))


if __name__ == "__main__":
    unittest.main()
