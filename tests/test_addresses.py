import os
from array import array

import pytest

from memori.addresses import AddressSet, ScanExpr, ScanOp
from memori.memory_map import Device, MemoryMap, Permissions
from memori.memory_reader import ValueType
from memori.process import Process


class _FakeReader:
    def __init__(self, memory):
        self.memory = memory

    def read(self, addr, value_type):
        return self.memory[addr]


def _map(start, end, read=True):
    return MemoryMap(
        addr_start=start,
        addr_end=end,
        perms=Permissions(read=read, write=True, execute=False, private=True, shared=False),
        offset=0,
        dev=Device(0, 0),
        inode=0,
        pathname="",
    )


def _buffer_process(buf, read=True):
    addr, count = buf.buffer_info()
    end = addr + count * buf.itemsize
    return Process(pid=os.getpid(), command="", memory_maps=[_map(addr, end, read)]), addr


def test_scan_addrs_simple():
    process = Process.open(os.getpid())
    weird_numbers = array("i", [0xC0FFEE, 0xC0FFEE, 0xC0FFEE])
    scan_expr = ScanExpr(ScanOp.EQUAL, str(weird_numbers[0]))
    addrs = AddressSet(process, ValueType.I32)
    addrs.scan(scan_expr, lambda _s, _t: None)

    assert len(addrs) >= len(weird_numbers)
    base = weird_numbers.buffer_info()[0]
    found = addrs.addresses()
    assert base in found
    assert base + 4 in found
    assert base + 8 in found


@pytest.mark.parametrize(
    "op, operand, expected",
    [
        (ScanOp.EQUAL, "5", [(5, 0), (5, 2)]),
        (ScanOp.NOT_EQUAL, "5", [(7, 1), (3, 3)]),
        (ScanOp.LESS, "5", [(3, 3)]),
        (ScanOp.LESS_EQUAL, "5", [(5, 0), (5, 2), (3, 3)]),
        (ScanOp.GREATER, "5", [(7, 1)]),
        (ScanOp.GREATER_EQUAL, "5", [(5, 0), (7, 1), (5, 2)]),
    ],
)
def test_evaluate_comparisons(op, operand, expected):
    expr = ScanExpr(op, operand)
    result = list(expr.evaluate([5, 7, 5, 3], range(4), ValueType.I32))
    assert result == expected


def test_evaluate_unknown_and_refresh_keep_everything():
    for op in (ScanOp.UNKNOWN, ScanOp.REFRESH):
        result = list(ScanExpr(op).evaluate([1, 2], [10, 20], ValueType.U8))
        assert result == [(1, 10), (2, 20)]


def test_evaluate_changed_and_not_changed():
    reader = _FakeReader({10: 1, 20: 99})
    changed = list(ScanExpr(ScanOp.CHANGED).evaluate([1, 2], [10, 20], ValueType.I32, reader))
    same = list(ScanExpr(ScanOp.NOT_CHANGED).evaluate([1, 2], [10, 20], ValueType.I32, reader))
    assert changed == [(2, 20)]
    assert same == [(1, 10)]


def test_evaluate_bad_operand_raises():
    with pytest.raises(ValueError):
        ScanExpr(ScanOp.EQUAL, "abc").evaluate([1], [0], ValueType.I32)
    with pytest.raises(ValueError):
        ScanExpr(ScanOp.LESS, "300").evaluate([1], [0], ValueType.U8)


def test_comparison_without_operand_raises():
    with pytest.raises(ValueError):
        ScanExpr(ScanOp.GREATER)


def test_changed_without_reader_raises():
    with pytest.raises(ValueError):
        ScanExpr(ScanOp.CHANGED).evaluate([1], [0], ValueType.I32)


def test_initial_scan_of_buffer_region():
    buf = array("i", [5, 7, 5])
    process, base = _buffer_process(buf)
    addrs = AddressSet(process, ValueType.I32)
    calls = []
    addrs.scan(ScanExpr(ScanOp.UNKNOWN), lambda s, t: calls.append((s, t)))
    assert addrs.addresses() == [base, base + 4, base + 8]
    assert addrs.values() == ["5", "7", "5"]
    assert calls == [(1, 1)]


def test_initial_equal_scan_of_buffer_region():
    buf = array("i", [5, 7, 5])
    process, base = _buffer_process(buf)
    addrs = AddressSet(process, ValueType.I32)
    addrs.scan(ScanExpr(ScanOp.EQUAL, "5"))
    assert addrs.addresses() == [base, base + 8]
    assert addrs.values() == ["5", "5"]


def test_initial_greater_scan_of_buffer_region():
    buf = array("i", [5, 7, 5])
    process, base = _buffer_process(buf)
    addrs = AddressSet(process, ValueType.I32)
    addrs.scan(ScanExpr(ScanOp.GREATER, "5"))
    assert addrs.addresses() == [base + 4]
    assert addrs.values() == ["7"]


def test_unsigned_interpretation():
    buf = array("i", [-1, 2, 3])
    process, _base = _buffer_process(buf)
    addrs = AddressSet(process, ValueType.U32)
    addrs.scan(ScanExpr(ScanOp.UNKNOWN))
    assert addrs.values()[0] == str(ValueType.U32.max)


def test_unreadable_region_is_skipped():
    buf = array("i", [5, 7, 5])
    process, _base = _buffer_process(buf, read=False)
    addrs = AddressSet(process, ValueType.I32)
    calls = []
    addrs.scan(ScanExpr(ScanOp.UNKNOWN), lambda s, t: calls.append((s, t)))
    assert len(addrs) == 0
    assert calls == []


def test_rescan_changed_keeps_old_value_and_reports_progress():
    buf = array("i", [5, 7, 5])
    process, base = _buffer_process(buf)
    addrs = AddressSet(process, ValueType.I32)
    addrs.scan(ScanExpr(ScanOp.UNKNOWN))
    buf[1] = 9
    calls = []
    addrs.scan(ScanExpr(ScanOp.CHANGED), lambda s, t: calls.append((s, t)))
    assert addrs.addresses() == [base + 4]
    assert addrs.rows() == [(base + 4, "7", "9")]
    assert calls == [(0, 3), (3, 3)]


def test_rescan_not_changed():
    buf = array("h", [1, 2, 3, 4])
    process, base = _buffer_process(buf)
    addrs = AddressSet(process, ValueType.I16)
    addrs.scan(ScanExpr(ScanOp.UNKNOWN))
    buf[0] = 11
    buf[3] = 44
    addrs.scan(ScanExpr(ScanOp.NOT_CHANGED))
    assert addrs.addresses() == [base + 2, base + 4]
    assert addrs.values() == ["2", "3"]


def test_copy_is_independent():
    buf = array("i", [5, 7, 5])
    process, base = _buffer_process(buf)
    addrs = AddressSet(process, ValueType.I32)
    addrs.scan(ScanExpr(ScanOp.UNKNOWN))
    duplicate = addrs.copy()
    duplicate.scan(ScanExpr(ScanOp.EQUAL, "7"))
    assert duplicate.addresses() == [base + 4]
    assert len(addrs) == 3


def test_type_name_and_empty_process():
    process = Process(pid=os.getpid(), command="", memory_maps=[])
    addrs = AddressSet(process, ValueType.U64)
    addrs.scan(ScanExpr(ScanOp.UNKNOWN))
    assert addrs.type_name() == "u64"
    assert len(addrs) == 0