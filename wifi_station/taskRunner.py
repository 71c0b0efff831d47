# SPDX-FileCopyrightText: 2024 Ferenc Nandor Janky <ferenj@effective-range.com>
# SPDX-FileCopyrightText: 2024 Attila Gombos <attila.gombos@effective-range.com>
# SPDX-License-Identifier: MIT

from threading import Thread
from typing import Any, Callable

from context_logger import get_logger

log = get_logger('TaskRunner')


class ITaskRunner(object):

    def spawn(self, name: str, target: Callable[..., Any], *args: Any) -> None:
        raise NotImplementedError()


class ThreadTaskRunner(ITaskRunner):

    def spawn(self, name: str, target: Callable[..., Any], *args: Any) -> None:
        log.debug('Spawning task', task=name)
        Thread(target=self._run, args=(name, target, *args), name=name, daemon=True).start()

    def _run(self, name: str, target: Callable[..., Any], *args: Any) -> None:
        try:
            target(*args)
        except Exception as error:
            log.error('Task failed', task=name, error=error)
