"""
Pool of accelerator devices shared by solvers.

A :class:`DevicePool` hands out device numbers ``0..num_devices-1`` to
callers. :meth:`DevicePool.allocate_device` blocks until a device is free,
:meth:`DevicePool.free_device` returns it. The :meth:`DevicePool.device`
context manager pairs the two, also when the body raises.

The pool is an explicit object: create it once and pass it to every
solver that should share the devices.

    >>> pool = DevicePool(2)
    >>> with pool.device() as n:
    ...     run_on(n)

--------------------------------------------------
File        : TBS/Solver/device_pool.py
Description : Thread-safe device allocation.
--------------------------------------------------
"""

import  threading
from    contextlib  import contextmanager
from    typing      import Iterator, List, Optional

from    TBS.common.errors import InvalidArgumentError, InvalidStateError

####################################################################################################

class DevicePool:
    """
    Thread-safe pool of ``num_devices`` interchangeable devices.

    Parameters
    ----------
    num_devices : int
        Number of devices. ``0`` is allowed; every allocation then fails.
    """

    def __init__(self, num_devices: int):
        if isinstance(num_devices, bool) or not isinstance(num_devices, int) or num_devices < 0:
            raise InvalidArgumentError(f"Invalid number of devices '{num_devices}'.", where="DevicePool()")
        self._num_devices   = num_devices
        self._busy          : List[bool] = [False] * num_devices
        self._condition     = threading.Condition()

    @property
    def num_devices(self) -> int:
        return self._num_devices

    @property
    def num_free(self) -> int:
        with self._condition:
            return self._busy.count(False)

    def is_allocated(self, device: int) -> bool:
        with self._condition:
            return 0 <= device < self._num_devices and self._busy[device]

    # ------------------------------------------------------------------

    def allocate_device(self, timeout: Optional[float] = None) -> int:
        """
        Take the lowest free device, waiting until one is released.

        Parameters
        ----------
        timeout : float, optional
            Maximal waiting time in seconds; wait forever if ``None``.

        Raises
        ------
        InvalidStateError
            If the pool has no devices, or the timeout expired.
        """
        if self._num_devices == 0:
            raise InvalidStateError("The pool has no devices.", where="DevicePool.allocate_device()")
        with self._condition:
            if not self._condition.wait_for(lambda: not all(self._busy), timeout=timeout):
                raise InvalidStateError(f"No device became free within {timeout} s.",
                                        where="DevicePool.allocate_device()")
            device              = self._busy.index(False)
            self._busy[device]  = True
            return device

    def free_device(self, device: int) -> None:
        """
        Release a device obtained from :meth:`allocate_device`.

        Raises
        ------
        InvalidArgumentError
            If the device is out of range or not allocated.
        """
        with self._condition:
            if not (isinstance(device, int) and 0 <= device < self._num_devices) or not self._busy[device]:
                raise InvalidArgumentError(f"Device {device} is not allocated.", where="DevicePool.free_device()")
            self._busy[device] = False
            self._condition.notify()

    @contextmanager
    def device(self, timeout: Optional[float] = None) -> Iterator[int]:
        """Allocate a device for the duration of the ``with`` block."""
        n = self.allocate_device(timeout)
        try:
            yield n
        finally:
            self.free_device(n)

    def __repr__(self) -> str:
        return f"DevicePool(num_devices={self._num_devices}, free={self.num_free})"

# --------------------------------------------------------------------------------------------------
#! EOF
# --------------------------------------------------------------------------------------------------
