"""
In-process model of a single-page job site.

A Page is a BeautifulSoup tree plus the current URL. It stands in for the
browser document: drivers load or patch HTML, move the URL through the history
methods, and report clicks. Listeners registered per event receive the same
signals a content script gets from history interception, mutation
observation and delegated click handling.
"""

from typing import Callable, Dict, Iterable, List, Optional

from bs4 import BeautifulSoup, Tag
from soupsieve import SelectorSyntaxError

NAVIGATION = "navigation"
MUTATION = "mutation"
CLICK = "click"
EVENTS = (NAVIGATION, MUTATION, CLICK)


class Page:
    def __init__(self, html: str = "", url: str = ""):
        self.url = url
        self.soup = BeautifulSoup(html, "html.parser")
        self._listeners: Dict[str, List[Callable]] = {e: [] for e in EVENTS}

    # Listener registry

    def subscribe(self, event: str, callback: Callable) -> None:
        if event not in self._listeners:
            raise ValueError(f"Unknown page event: {event}")
        self._listeners[event].append(callback)

    def unsubscribe(self, event: str, callback: Callable) -> None:
        listeners = self._listeners.get(event, [])
        if callback in listeners:
            listeners.remove(callback)

    def _emit(self, event: str, *args) -> None:
        for callback in list(self._listeners[event]):
            callback(*args)

    # History API

    def push_state(self, url: str) -> None:
        self.url = url
        self._emit(NAVIGATION, "pushState")

    def replace_state(self, url: str) -> None:
        self.url = url
        self._emit(NAVIGATION, "replaceState")

    def pop_state(self, url: str) -> None:
        """Back/forward navigation."""
        self.url = url
        self._emit(NAVIGATION, "popstate")

    # Document access

    def select(self, selector: str) -> List[Tag]:
        """CSS select that treats a bad selector as no match."""
        try:
            return self.soup.select(selector)
        except (SelectorSyntaxError, ValueError):
            return []

    def select_one(self, selector: str) -> Optional[Tag]:
        found = self.select(selector)
        return found[0] if found else None

    def get_element_by_id(self, element_id: str) -> Optional[Tag]:
        return self.soup.find(id=element_id)

    @property
    def body(self) -> Optional[Tag]:
        return self.soup.body

    # Mutations

    def notify_mutations(self, targets: Iterable) -> None:
        self._emit(MUTATION, list(targets))

    def load(self, html: str, url: Optional[str] = None) -> None:
        """Replace the whole document, as a full re-render would."""
        if url is not None:
            self.url = url
        self.soup = BeautifulSoup(html, "html.parser")
        root = self.soup.body or self.soup
        self.notify_mutations([root])

    def set_inner_html(self, selector: str, html: str) -> Optional[Tag]:
        """Replace the children of the first element matching selector."""
        target = self.select_one(selector)
        if target is None:
            return None
        target.clear()
        fragment = BeautifulSoup(html, "html.parser")
        for child in list(fragment.contents):
            target.append(child.extract())
        self.notify_mutations([target])
        return target

    def click(self, target) -> None:
        self._emit(CLICK, target)
