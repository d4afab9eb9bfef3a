"""Theme data holder with an asynchronous ready lifecycle."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Iterable, Mapping, MutableMapping
from typing import Protocol

from style_shifter.logger import get_logger
from style_shifter.sources import fetch_image

logger = get_logger(__name__)

Scheduler = Callable[[Callable[[], None]], None]
ImageLoader = Callable[[str], Awaitable[object]]


class ClassNode(Protocol):
    """A rendering-tree node with class tokens, such as a Textual widget."""

    def has_class(self, *class_names: str) -> bool:
        """Check whether the node has every given class."""
        ...

    def add_class(self, *class_names: str) -> object:
        """Add class tokens."""
        ...

    def remove_class(self, *class_names: str) -> object:
        """Remove class tokens."""
        ...


def default_scheduler(callback: Callable[[], None]) -> None:
    """Run a callback on the next turn of the running event loop.

    Without a running loop there is no later turn, so the callback runs now.

    Args:
        callback: Callable to run.
    """
    try:
        loop = asyncio.get_running_loop()
    except RuntimeError:
        callback()
        return
    loop.call_soon(callback)


class Theme:
    """A named data set applied to nodes through a class token.

    A theme starts pending and becomes ready once every registered
    dependency (e.g. an image preload) has finished, successfully or not.
    The ready check for themes without dependencies is deferred to a later
    turn so dependencies registered right after construction still count.
    """

    def __init__(
        self,
        namespace: str,
        name: str,
        data: MutableMapping[str, object] | None = None,
        fonts: Mapping[str, str] | None = None,
        preload_images: Iterable[str] | None = None,
        *,
        image_loader: ImageLoader | None = None,
        scheduler: Scheduler | None = None,
    ) -> None:
        """Initialize the theme.

        Args:
            namespace: Namespace whose markers this theme answers.
            name: Class name used to scope selectors and mark nodes.
            data: Theme values; nested mappings are reachable by dotted paths.
            fonts: Font family name to source URL.
            preload_images: Image URLs to preload before the theme is ready.
                Preloading requires a running event loop.
            image_loader: Coroutine function used to preload one image.
            scheduler: Posts a callback to a later turn of execution.
        """
        self.namespace = namespace
        self.name = name
        self.data: MutableMapping[str, object] = data if data is not None else {}
        self._fonts: dict[str, str] | None = dict(fonts) if fonts else None
        self._pending_dependencies = 0
        self._completed_callbacks: list[Callable[[], None]] = []
        self._ready_waiters: list[asyncio.Future[None]] = []
        self._is_completed = False

        (scheduler or default_scheduler)(self._check_ready)

        if preload_images:
            self.preload_images(preload_images, image_loader)

    def __repr__(self) -> str:
        return f"Theme(namespace={self.namespace!r}, name={self.name!r})"

    @property
    def source(self) -> MutableMapping[str, object]:
        """The data mapping the theme was created with."""
        return self.data

    @property
    def pending_dependencies(self) -> int:
        """Number of dependencies still loading."""
        return self._pending_dependencies

    @property
    def is_completed(self) -> bool:
        """Whether the theme reached the ready state."""
        return self._is_completed

    def get_fonts(self) -> dict[str, str] | None:
        """Get the font family to source URL mapping, if any."""
        return self._fonts

    def get_value(self, key: str) -> object:
        """Get a top-level data value, or None if unset."""
        return self.data.get(key)

    def set_value(self, key: str, value: object) -> None:
        """Set a top-level data value."""
        self.data[key] = value

    def apply_to(self, node: ClassNode) -> None:
        """Add the theme class to a node if it is not there yet.

        Args:
            node: Node to mark.
        """
        if not node.has_class(self.name):
            node.add_class(self.name)

    def remove_from(self, node: ClassNode) -> None:
        """Remove the theme class from a node.

        Args:
            node: Node to unmark.
        """
        node.remove_class(self.name)

    def on_complete(self, callback: Callable[[], None]) -> None:
        """Run a callback once the theme is ready.

        Args:
            callback: Called immediately if the theme is already ready.
        """
        if self._is_completed:
            callback()
        else:
            self._completed_callbacks.append(callback)

    async def wait_ready(self) -> None:
        """Wait until the theme is ready."""
        if self._is_completed:
            return
        waiter: asyncio.Future[None] = asyncio.get_running_loop().create_future()
        self._ready_waiters.append(waiter)
        await waiter

    def add_dependency(self) -> Callable[[], None]:
        """Register a pending dependency.

        Returns:
            A callable signalling the dependency finished. Calling it more
            than once has no further effect.
        """
        self._pending_dependencies += 1
        resolved = False

        def resolve() -> None:
            nonlocal resolved
            if resolved:
                return
            resolved = True
            self._dependency_loaded()

        return resolve

    def track(self, awaitable: Awaitable[object]) -> asyncio.Future[object]:
        """Count an awaitable as a dependency until it finishes.

        Args:
            awaitable: Work to wait for; failure counts as finished.

        Returns:
            The scheduled future.

        Raises:
            RuntimeError: If no event loop is running.
        """
        asyncio.get_running_loop()
        resolve = self.add_dependency()
        future = asyncio.ensure_future(awaitable)

        def done(task: asyncio.Future[object]) -> None:
            if not task.cancelled() and task.exception() is not None:
                logger.warning(f"Dependency of theme {self.name} failed: {task.exception()}")
            resolve()

        future.add_done_callback(done)
        return future

    def preload_images(self, urls: Iterable[str], loader: ImageLoader | None = None) -> None:
        """Preload images before the theme becomes ready.

        Args:
            urls: Image URLs; empty entries are ignored.
            loader: Coroutine function downloading one image.

        Raises:
            RuntimeError: If no event loop is running.
        """
        asyncio.get_running_loop()
        load = loader or fetch_image
        for url in urls:
            if url:
                self.track(load(url))

    def _check_ready(self) -> None:
        if self._pending_dependencies == 0:
            self._dispatch_complete()

    def _dependency_loaded(self) -> None:
        self._pending_dependencies -= 1
        if self._pending_dependencies == 0:
            self._dispatch_complete()

    def _dispatch_complete(self) -> None:
        if self._is_completed:
            return
        self._is_completed = True
        logger.debug(f"Theme {self.name} is ready")
        callbacks, self._completed_callbacks = self._completed_callbacks, []
        for callback in callbacks:
            try:
                callback()
            except Exception:
                logger.exception(f"Completion callback for theme {self.name} failed")
        for waiter in self._ready_waiters:
            if not waiter.done():
                waiter.set_result(None)
        self._ready_waiters = []
