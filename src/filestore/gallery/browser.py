"""Read-only photo gallery over a storage resource

Photos are organized as ``<gallery resource>/<year>/<category>/<file>``;
a year may also hold media directly, without categories. Everything here
is built on ``StorageService.list`` and reuses the returned item paths
for the next listing.

A branch that disappears between listings (``NotFoundError``) counts as
empty. Any other error propagates to the caller.
"""

import os
from dataclasses import asdict, dataclass
from typing import Any, Dict, Iterable, List, Optional
from urllib.parse import quote

from filestore.exceptions import NotFoundError
from filestore.logger import Logger
from filestore.storage import ItemKind, StorageItem, StorageService

GALLERY_RESOURCE_KEY = "gallery"
DEFAULT_DOWNLOAD_URL_TEMPLATE = "/api/resources/{resource_key}/storage/download?path={path}"

IMAGE_EXTENSIONS = frozenset({".jpg", ".jpeg", ".png", ".gif", ".bmp", ".webp", ".svg"})
DOCUMENT_EXTENSIONS = frozenset({".pdf"})


def _extension(filename: str) -> str:
    return os.path.splitext(filename)[1].lower()


def is_image_file(filename: str) -> bool:
    return _extension(filename) in IMAGE_EXTENSIONS


def is_media_file(filename: str) -> bool:
    ext = _extension(filename)
    return ext in IMAGE_EXTENSIONS or ext in DOCUMENT_EXTENSIONS


def _is_media_item(item: StorageItem) -> bool:
    return item.kind == ItemKind.FILE and is_media_file(item.display_name)


def _is_year_folder(item: StorageItem) -> bool:
    return item.kind == ItemKind.FOLDER and item.display_name.isdecimal()


@dataclass(frozen=True)
class GalleryPhoto:
    filename: str
    path: str
    filename_without_extension: str
    year: int
    category: Optional[str]
    url: str
    type: str  # "image" or "pdf"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "filename": self.filename,
            "path": self.path,
            "filenameWithoutExtension": self.filename_without_extension,
            "year": self.year,
            "category": self.category,
            "url": self.url,
            "type": self.type,
        }


@dataclass(frozen=True)
class GalleryCard:
    """One category of one year, summarised for an overview page."""

    id: str
    name: str
    year: int
    category: str
    photo_count: int
    thumbnail: Optional[str]

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["photoCount"] = data.pop("photo_count")
        return data


class GalleryBrowser:
    """Groups gallery media by year and category."""

    def __init__(
        self,
        service: StorageService,
        resource_key: str = GALLERY_RESOURCE_KEY,
        download_url_template: str = DEFAULT_DOWNLOAD_URL_TEMPLATE,
        logger: Optional[Logger] = None,
    ):
        self.service = service
        self.resource_key = resource_key
        self.download_url_template = download_url_template
        self.logger = logger or service.logger

    def download_url(self, path: str) -> str:
        return self.download_url_template.format(
            resource_key=self.resource_key, path=quote(path, safe="")
        )

    def _list(self, path: Optional[str]) -> List[StorageItem]:
        return self.service.list(self.resource_key, path).items

    def _list_branch(self, path: str) -> Optional[List[StorageItem]]:
        """List a sub-branch; None when it vanished (treated as empty by callers)."""
        try:
            return self._list(path)
        except NotFoundError:
            self.logger.debug("Gallery branch not found", path=path)
            return None

    def _year_folders(self) -> List[StorageItem]:
        return [item for item in self._list(None) if _is_year_folder(item)]

    def _photo(self, item: StorageItem, year: int, category: Optional[str]) -> GalleryPhoto:
        return GalleryPhoto(
            filename=item.display_name,
            path=item.relative_path,
            filename_without_extension=item.display_name_without_extension,
            year=year,
            category=category,
            url=self.download_url(item.relative_path),
            type="image" if is_image_file(item.display_name) else "pdf",
        )

    def _year_photos(self, year: int, items: Iterable[StorageItem]) -> List[GalleryPhoto]:
        items = list(items)
        categories = [item for item in items if item.kind == ItemKind.FOLDER]
        if not categories:
            return [self._photo(item, year, None) for item in items if _is_media_item(item)]

        photos: List[GalleryPhoto] = []
        for category in categories:
            category_items = self._list_branch(category.relative_path) or []
            photos.extend(
                self._photo(item, year, category.display_name)
                for item in category_items
                if _is_media_item(item)
            )
        return photos

    def years(self) -> List[int]:
        """Numeric folder names at the gallery root, newest first."""
        return sorted((int(item.display_name) for item in self._year_folders()), reverse=True)

    def photos(self, year: Optional[int] = None) -> List[GalleryPhoto]:
        """Media of one year, or of every year when ``year`` is None.

        Raises:
            NotFoundError: If a specific ``year`` folder doesn't exist
        """
        if year is not None:
            return self._year_photos(year, self._list(str(year)))

        photos: List[GalleryPhoto] = []
        for folder in self._year_folders():
            items = self._list_branch(folder.relative_path)
            if items is not None:
                photos.extend(self._year_photos(int(folder.display_name), items))
        return photos

    def has_photos(self, year: int) -> bool:
        """Whether the year folder holds media directly."""
        items = self._list_branch(str(year))
        if not items:
            return False
        return any(_is_media_item(item) for item in items)

    def years_with_photos(self) -> List[int]:
        """Years with media directly or in any category, newest first."""
        years: List[int] = []
        for folder in self._year_folders():
            items = self._list_branch(folder.relative_path)
            if items is None:
                continue
            if self._has_media(items):
                years.append(int(folder.display_name))
        return sorted(years, reverse=True)

    def _has_media(self, items: List[StorageItem]) -> bool:
        categories = [item for item in items if item.kind == ItemKind.FOLDER]
        if not categories:
            return any(_is_media_item(item) for item in items)
        for category in categories:
            category_items = self._list_branch(category.relative_path) or []
            if any(_is_media_item(item) for item in category_items):
                return True
        return False

    def cards(self, year: Optional[int] = None) -> List[GalleryCard]:
        """One card per category holding media.

        Raises:
            NotFoundError: If a specific ``year`` folder doesn't exist
        """
        if year is not None:
            return self._year_cards(year, self._list(str(year)))

        cards: List[GalleryCard] = []
        for folder in self._year_folders():
            items = self._list_branch(folder.relative_path)
            if items is not None:
                cards.extend(self._year_cards(int(folder.display_name), items))
        if not cards:
            self.logger.info("No gallery cards found", resource_key=self.resource_key)
        return cards

    def _year_cards(self, year: int, items: List[StorageItem]) -> List[GalleryCard]:
        cards: List[GalleryCard] = []
        for category in (item for item in items if item.kind == ItemKind.FOLDER):
            category_items = self._list_branch(category.relative_path)
            if not category_items:
                continue
            media = [item for item in category_items if _is_media_item(item)]
            if not media:
                continue
            first_image = next((item for item in media if is_image_file(item.display_name)), None)
            cards.append(
                GalleryCard(
                    id=f"{year}_{category.display_name}",
                    name=category.display_name,
                    year=year,
                    category=category.display_name,
                    photo_count=len(media),
                    thumbnail=self.download_url(first_image.relative_path) if first_image else None,
                )
            )
        return cards

    def card_photos(self, year: int, category: str) -> List[GalleryPhoto]:
        """Media of a single category.

        Raises:
            NotFoundError: If the category folder doesn't exist
        """
        items = self._list(f"{year}/{category}")
        return [self._photo(item, year, category) for item in items if _is_media_item(item)]

