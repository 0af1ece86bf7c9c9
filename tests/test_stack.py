import pytest

from chip8vm.errors import StackOverflow, StackUnderflow
from chip8vm.stack import CallStack


class TestCallStack:

    def test_push_pop_is_lifo(self):
        stack = CallStack()
        stack.push(0x202)
        stack.push(0x304)
        assert stack.peek() == 0x304
        assert stack.pop() == 0x304
        assert stack.pop() == 0x202
        assert stack.empty

    def test_sixteen_fit_seventeenth_overflows(self):
        stack = CallStack()
        for depth in range(16):
            stack.push(0x200 + 2 * depth)
        assert stack.full
        with pytest.raises(StackOverflow) as info:
            stack.push(0x400)
        assert info.value.depth == 16
        assert stack.sp == 16
        assert stack.frames()[-1] == 0x21E

    def test_underflow(self):
        stack = CallStack()
        with pytest.raises(StackUnderflow):
            stack.pop()
        assert stack.sp == 0
