"""Block-contiguous memory arena handing out views into pre-allocated blocks."""

from __future__ import annotations

from array import array


class MemoryArena:
    """Hands out contiguous views carved out of large pre-allocated blocks.

    The arena starts with one block of ``size`` elements. An allocation that
    does not fit in what is left of the current block starts a fresh block.
    If the request is larger than the block size, the size is doubled until
    it fits. Older blocks are kept alive, so views handed out earlier stay
    valid, but their unused tails are wasted.
    """

    def __init__(self, size: int, typecode: str = "B") -> None:
        if size <= 0:
            raise ValueError("arena size must be positive")
        self._typecode = typecode
        self._itemsize = array(typecode).itemsize
        self._block_size = size
        self._blocks: list[array] = [self._new_block()]
        self._begin = 0
        self._end = size
        self._used = 0

    @property
    def itemsize(self) -> int:
        """Size in bytes of one element."""
        return self._itemsize

    def _new_block(self) -> array:
        return array(self._typecode, bytes(self._block_size * self._itemsize))

    def _extend(self) -> None:
        self._blocks.append(self._new_block())
        self._begin = 0
        self._end = self._block_size

    def alloc(self, size: int) -> memoryview:
        """Return a writable view of ``size`` elements."""
        if size < 0:
            raise ValueError("allocation size must not be negative")
        if size > self._end - self._begin:
            while size > self._block_size:
                self._block_size *= 2
            self._extend()

        view = memoryview(self._blocks[-1])[self._begin : self._begin + size]
        self._begin += size
        self._used += size
        return view

    def used(self) -> int:
        """Number of bytes handed out so far."""
        return self._used * self._itemsize


class DefaultHeapAllocator:
    """Allocator that gives every request its own fresh buffer."""

    def alloc(self, size: int) -> bytearray:
        """Return a zero-filled buffer of ``size`` bytes."""
        if size < 0:
            raise ValueError("allocation size must not be negative")
        return bytearray(size)