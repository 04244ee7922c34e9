"""
Option descriptor behavioral tests.

Scope
- Validate construction of every kind: spellings, targets, defaults, payloads.
- Validate derived properties (size, strict, metavar, boolean).
- Validate immutability, __replace__ and the resolved Table view.
- Validate construction helpers (declare, switch, @callback).

Conventions
- Test method names follow CamelCase per project convention.
"""
import copy
import ctypes
import unittest
from unittest import TestCase

from dryopt import (
    Kind,
    Arity,
    Combine,
    Option,
    String,
    Char,
    Signed,
    Unsigned,
    Floating,
    Callback,
    Enumerated,
    Cell,
    Table,
    declare,
    switch,
    callback,
)


def handler(option, text):
    return len(text or "")


class TestSpellings(TestCase):

    def testShortAndLong(self):
        option = Signed("v", "value", bytearray(2))
        self.assertEqual(option.short, "v")
        self.assertEqual(option.long, "value")

    def testOneSpellingIsEnough(self):
        self.assertIsNone(Signed("v", target=bytearray(2)).long)
        self.assertIsNone(Signed(long="value", target=bytearray(2)).short)

    def testNoSpellingRejected(self):
        with self.assertRaises(TypeError):
            Signed(target=bytearray(2))

    def testShortMustBeOneCharacter(self):
        with self.assertRaises(ValueError):
            Signed("vv", target=bytearray(2))

    def testShortDashRejected(self):
        with self.assertRaises(ValueError):
            Signed("-", target=bytearray(2))

    def testShortMustBeString(self):
        with self.assertRaises(TypeError):
            Signed(1, target=bytearray(2))

    def testLongSeparatorsRejected(self):
        for long in ("a=b", "a:b", "a b", ""):
            with self.subTest(long=long):
                with self.assertRaises(ValueError):
                    Signed(long=long, target=bytearray(2))

    def testDescrIsStripped(self):
        self.assertEqual(Signed("v", target=bytearray(2), descr="  set value ").descr, "set value")

    def testEmptyDescrRejected(self):
        with self.assertRaises(ValueError):
            Signed("v", target=bytearray(2), descr="   ")

    def testArityMustBeArity(self):
        with self.assertRaises(TypeError):
            Signed("v", target=bytearray(2), arity=2)


class TestKinds(TestCase):

    def testOptionIsAbstract(self):
        with self.assertRaises(TypeError):
            Option("v")

    def testSignedDefaults(self):
        option = Signed("v", "value", bytearray(2))
        self.assertIs(option.kind, Kind.SIGNED)
        self.assertIs(option.arity, Arity.REQUIRED)
        self.assertIs(option.combine, Combine.OVERWRITE)
        self.assertEqual(option.default, 0)
        self.assertEqual(option.size, 2)

    def testIntegerWidths(self):
        for size in range(1, 9):
            self.assertEqual(Unsigned("u", target=bytearray(size)).size, size)
        with self.assertRaises(ValueError):
            Unsigned("u", target=bytearray(9))

    def testTargetRequired(self):
        with self.assertRaises(TypeError):
            Signed("v")

    def testTargetMustBeWritableBuffer(self):
        with self.assertRaises(TypeError):
            Signed("v", target=b"\x00\x00")

    def testIntegerDefaultValidated(self):
        with self.assertRaises(TypeError):
            Signed("v", target=bytearray(2), default="1")
        with self.assertRaises(TypeError):
            Signed("v", target=bytearray(2), default=True)
        with self.assertRaises(ValueError):
            Signed("v", target=bytearray(2), default=1 << 64)

    def testCombineValidated(self):
        with self.assertRaises(TypeError):
            Signed("v", target=bytearray(2), combine="or")

    def testUnsignedDefaultFollowsArity(self):
        self.assertEqual(Unsigned("u", target=bytearray(1), arity=Arity.NONE).default, 1)
        self.assertEqual(Unsigned("u", target=bytearray(1)).default, 0)

    def testUnsignedNegativeDefaultRejected(self):
        with self.assertRaises(ValueError):
            Unsigned("u", target=bytearray(1), default=-1)

    def testUnsignedBoolean(self):
        self.assertTrue(Unsigned("u", target=bytearray(1), arity=Arity.NONE).boolean)
        self.assertTrue(Unsigned("u", target=bytearray(1), arity=Arity.NONE, default=4, combine=Combine.OR).boolean)
        self.assertFalse(Unsigned("u", target=bytearray(1), arity=Arity.NONE, default=2).boolean)
        self.assertFalse(Unsigned("u", target=bytearray(1)).boolean)

    def testStringTarget(self):
        cell = Cell()
        option = String("o", "output", cell)
        self.assertIs(option.target, cell)
        self.assertIsNone(option.size)
        self.assertIsNone(option.default)
        with self.assertRaises(TypeError):
            String("o", target=bytearray(2))
        with self.assertRaises(TypeError):
            String("o", target=Cell(), default=1)

    def testCharDefault(self):
        self.assertEqual(Char("c", target=bytearray(1), default="x").default, ord("x"))
        self.assertEqual(Char("c", target=bytearray(1), default=65).default, 65)
        self.assertEqual(Char("c", target=bytearray(1), default="é").default, 0xc3)
        with self.assertRaises(ValueError):
            Char("c", target=bytearray(1), default="xy")

    def testFloatingWidths(self):
        self.assertEqual(Floating("f", target=ctypes.c_double()).size, 8)
        self.assertEqual(Floating("f", target=ctypes.c_float()).size, 4)
        self.assertEqual(Floating("f", target=bytearray(2)).size, 2)
        with self.assertRaises(ValueError):
            Floating("f", target=bytearray(3))

    def testFloatingDefaultIsFloat(self):
        self.assertEqual(Floating("f", target=ctypes.c_double(), default=2).default, 2.0)
        with self.assertRaises(TypeError):
            Floating("f", target=ctypes.c_double(), default="2")

    def testCallbackHandler(self):
        option = Callback("c", "call", handler)
        self.assertIs(option.handler, handler)
        self.assertIsNone(option.target)
        self.assertIsNone(option.slot)
        with self.assertRaises(TypeError):
            Callback("c", "call", "handler")

    def testEnumeratedChoices(self):
        option = Enumerated("m", "mode", bytearray(1), ["never", "auto", "always"])
        self.assertEqual(option.choices, ("never", "auto", "always"))

    def testEnumeratedChoicesValidated(self):
        with self.assertRaises(TypeError):
            Enumerated("m", target=bytearray(1), choices="never")
        with self.assertRaises(TypeError):
            Enumerated("m", target=bytearray(1), choices=[1, 2])
        with self.assertRaises(ValueError):
            Enumerated("m", target=bytearray(1), choices=[])
        with self.assertRaises(ValueError):
            Enumerated("m", target=bytearray(1), choices=["a", "a"])
        with self.assertRaises(ValueError):
            Enumerated("m", target=bytearray(1), choices=["a", ""])


class TestDerived(TestCase):

    def testStrictKinds(self):
        self.assertTrue(Signed("v", target=bytearray(2)).strict)
        self.assertTrue(Unsigned("u", target=bytearray(2)).strict)
        self.assertTrue(Floating("f", target=ctypes.c_double()).strict)
        self.assertTrue(Callback("c", handler=handler).strict)
        self.assertFalse(String("s", target=Cell()).strict)
        self.assertFalse(Char("c", target=bytearray(1)).strict)
        self.assertFalse(Enumerated("m", target=bytearray(1), choices=["a"]).strict)

    def testMetavar(self):
        self.assertEqual(Signed("v", target=bytearray(2)).metavar, "SIGNED")
        self.assertEqual(String("s", target=Cell()).metavar, "STR")
        self.assertEqual(Callback("c", handler=handler).metavar, "ARG")
        self.assertEqual(Enumerated("m", target=bytearray(1), choices=["a", "b"]).metavar, "a,b")

    def testReadOnly(self):
        option = Signed("v", target=bytearray(2))
        with self.assertRaises(AttributeError):
            option.short = "x"

    def testRepr(self):
        option = Signed("v", "value", bytearray(2))
        self.assertTrue(repr(option).startswith("signed(short='v', long='value'"))

    def testTypename(self):
        self.assertEqual(Signed.__typename__, "signed")
        self.assertEqual(Enumerated.__typename__, "enumerated")


class TestReplace(TestCase):

    def testReplaceSharesTarget(self):
        target = bytearray(2)
        option = Signed("v", "value", target, "set value")
        replaced = copy.replace(option, arity=Arity.OPTIONAL)
        self.assertIsNot(replaced, option)
        self.assertIs(replaced.target, target)
        self.assertIs(replaced.arity, Arity.OPTIONAL)
        self.assertIs(option.arity, Arity.REQUIRED)
        self.assertEqual(replaced.descr, "set value")

    def testReplaceRevalidates(self):
        option = Signed("v", "value", bytearray(2))
        with self.assertRaises(ValueError):
            copy.replace(option, short="--")

    def testReplaceCallback(self):
        option = Callback("c", "call", handler)
        self.assertIs(copy.replace(option, arity=Arity.OPTIONAL).handler, handler)


class TestTable(TestCase):

    def testEnumeratedForcedRequiredInCopy(self):
        option = Enumerated("m", "mode", bytearray(1), ["a", "b"], arity=Arity.OPTIONAL)
        table = Table([option])
        self.assertIs(table[0].arity, Arity.REQUIRED)
        self.assertIsNot(table[0], option)
        self.assertIs(option.arity, Arity.OPTIONAL)

    def testOtherOptionsKept(self):
        option = Signed("v", target=bytearray(2), arity=Arity.OPTIONAL)
        self.assertIs(Table([option])[0], option)

    def testRejectsNonOptions(self):
        with self.assertRaises(TypeError):
            Table([object()])

    def testLookups(self):
        value = Signed("v", "value", bytearray(2))
        flag = switch("n", "flag", bytearray(1))
        table = Table([value, flag])
        self.assertIs(table.short("v"), value)
        self.assertIs(table.long("flag"), flag)
        self.assertIsNone(table.short("x"))
        self.assertIsNone(table.long("missing"))
        self.assertIs(table.negatable("flag"), flag)
        self.assertIsNone(table.negatable("value"))
        self.assertEqual(len(table), 2)
        self.assertEqual(list(table), [value, flag])

    def testFirstMatchWins(self):
        first = Signed("v", target=bytearray(2))
        second = Signed("v", target=bytearray(2))
        self.assertIs(Table([first, second]).short("v"), first)


class TestHelpers(TestCase):

    def testDeclareInfersIntegers(self):
        self.assertIs(declare("v", None, ctypes.c_int()).kind, Kind.SIGNED)
        self.assertEqual(declare("v", None, ctypes.c_int16()).size, 2)
        self.assertIs(declare("u", None, ctypes.c_uint8()).kind, Kind.UNSIGNED)
        self.assertIs(declare("u", None, ctypes.c_ulonglong()).kind, Kind.UNSIGNED)

    def testDeclareInfersBoolean(self):
        option = declare(None, "prefix", ctypes.c_bool(True))
        self.assertIs(option.kind, Kind.UNSIGNED)
        self.assertIs(option.arity, Arity.NONE)
        self.assertTrue(option.boolean)

    def testDeclareInfersOtherKinds(self):
        self.assertIs(declare("f", None, ctypes.c_double()).kind, Kind.FLOATING)
        self.assertIs(declare("c", None, ctypes.c_char()).kind, Kind.CHAR)
        self.assertIs(declare("s", None, Cell()).kind, Kind.STRING)
        self.assertIs(declare("s", None, ctypes.c_wchar_p()).kind, Kind.STRING)
        self.assertIs(declare("x", None, handler).kind, Kind.CALLBACK)

    def testDeclarePassesOptions(self):
        option = declare("v", None, ctypes.c_int(), "set value", arity=Arity.OPTIONAL, default=3)
        self.assertIs(option.arity, Arity.OPTIONAL)
        self.assertEqual(option.default, 3)
        self.assertEqual(option.descr, "set value")

    def testDeclareRejectsUnknownTargets(self):
        with self.assertRaises(TypeError):
            declare("x", None, ctypes.c_char_p())
        with self.assertRaises(TypeError):
            declare("x", None, object())

    def testSwitch(self):
        option = switch("n", "flag", bytearray(1))
        self.assertIs(option.arity, Arity.NONE)
        self.assertEqual(option.default, 1)
        self.assertIs(option.combine, Combine.OVERWRITE)

    def testSwitchBit(self):
        option = switch("f", "foo", bytearray(1), bit=4)
        self.assertEqual(option.default, 4)
        self.assertIs(option.combine, Combine.OR)
        self.assertTrue(option.boolean)
        with self.assertRaises(ValueError):
            switch("f", "foo", bytearray(1), bit=0)

    def testCallbackDecorator(self):
        @callback("c", "call", "call the callback", arity=Arity.OPTIONAL)
        def on_call(option, text):
            return 0

        self.assertIsInstance(on_call, Callback)
        self.assertEqual(on_call.long, "call")
        self.assertIs(on_call.arity, Arity.OPTIONAL)
        self.assertEqual(on_call.handler.__name__, "on_call")

    def testCallbackDecoratorRejectsNonCallable(self):
        with self.assertRaises(TypeError):
            callback("c")(1)


if __name__ == "__main__":
    unittest.main()
