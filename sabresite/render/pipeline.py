"""TransformPipeline — runs ordered transforms on page source before rendering."""

from abc import ABC, abstractmethod

from sabresite.content.models import Page


class Transform(ABC):
    @abstractmethod
    def apply(self, content: str, page: Page) -> str:
        """Transform page source. *page* carries the parsed front matter."""
        ...


class TransformPipeline:
    def __init__(self, transforms: list[Transform]):
        self.transforms = transforms

    def apply(self, content: str, page: Page) -> str:
        for t in self.transforms:
            content = t.apply(content, page)
        return content
