#!/usr/bin/env python3

# GRIT - Automated grading of programming exercises
# Copyright © 2014 Team GRIT
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU Affero General Public License as
# published by the Free Software Foundation, either version 3 of the
# License, or (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU Affero General Public License for more details.
#
# You should have received a copy of the GNU Affero General Public License
# along with this program.  If not, see <http://www.gnu.org/licenses/>.

"""A fixed-rate timer running in its own greenlet.

A Ticker calls a function at the instants start + k * period, for
k = 0, 1, 2, ... Calls never overlap: if a call lasts longer than a
period, the instants it overran are coalesced into a single call made
as soon as it returns, and afterwards the ticker is back on the grid.

"""

import logging
import math
from collections.abc import Callable
from datetime import datetime, timedelta

import gevent

from gritcommon.datetime import make_datetime


__all__ = ["Ticker", "next_instant_index"]


logger = logging.getLogger(__name__)


def next_instant_index(start: datetime, period: timedelta, now: datetime,
                       last_index: int | None = None) -> int:
    """Return the index k of the next instant start + k * period to fire.

    If nothing fired yet, that is the last instant not after now (so an
    instant already passed fires right away) or the start itself if it
    is still in the future. Otherwise it is the instant after the last
    one fired, unless later instants already passed, in which case the
    missed ones are skipped in favour of the most recent.

    start: the first instant.
    period: the distance between instants, positive.
    now: the current time.
    last_index: the index of the last instant fired, if any.

    """
    elapsed = math.floor((now - start) / period)
    if last_index is None:
        return max(0, elapsed)
    return max(last_index + 1, elapsed)


class Ticker:
    """Call a function at fixed-rate instants until disarmed."""

    def __init__(self, func: Callable[[], object], start: datetime,
                 period: timedelta,
                 clock: Callable[[], datetime] = make_datetime,
                 name: str = "ticker"):
        """Prepare a ticker; nothing happens until arm() is called.

        func: the function to call at each instant. Exceptions it
            raises are logged and do not stop the ticker.
        start: the first instant, a naive UTC datetime.
        period: the distance between instants.
        clock: the function telling the current time.
        name: a description of the ticker for the logs.

        """
        if period <= timedelta():
            raise ValueError("The period of %s must be positive." % name)
        self._func = func
        self._start = start
        self._period = period
        self._clock = clock
        self._name = name

        self._greenlet: gevent.Greenlet | None = None
        self._disarmed = False
        self._in_tick = False
        self._last_index: int | None = None

    @property
    def armed(self) -> bool:
        return self._greenlet is not None and not self._disarmed

    @property
    def disarmed(self) -> bool:
        return self._disarmed

    def initial_delay(self) -> timedelta:
        """Return how long until the first instant, from now."""
        return max(timedelta(), self._start - self._clock())

    def arm(self):
        """Start calling the function in a new greenlet."""
        if self._disarmed:
            raise RuntimeError("Cannot re-arm %s." % self._name)
        if self._greenlet is None:
            logger.debug("Arming %s, first call in %s.",
                         self._name, self.initial_delay())
            self._greenlet = gevent.spawn(self._run)

    def disarm(self):
        """Prevent any further call of the function.

        A call in progress is not interrupted; the ticker just stops
        after it. Disarming is permanent.

        """
        if self._disarmed:
            return
        self._disarmed = True
        logger.debug("Disarming %s.", self._name)
        greenlet = self._greenlet
        if greenlet is not None and not self._in_tick \
                and greenlet is not gevent.getcurrent():
            greenlet.kill(block=False)

    def join(self, timeout: float | None = None):
        """Wait for the greenlet of the ticker to end."""
        if self._greenlet is not None:
            self._greenlet.join(timeout)

    def _run(self):
        while not self._disarmed:
            index = next_instant_index(self._start, self._period,
                                       self._clock(), self._last_index)
            instant = self._start + index * self._period
            delay = (instant - self._clock()).total_seconds()
            if delay > 0:
                gevent.sleep(delay)
            if self._disarmed:
                break
            self._last_index = index
            self._in_tick = True
            try:
                self._func()
            except Exception:
                logger.error("Unexpected error in %s.", self._name,
                             exc_info=True)
            finally:
                self._in_tick = False
