from __future__ import annotations

from typing import Iterator

from .diagnostics import Diagnostics, NameCollisionWarning
from .errors import RegistryFrozenError, RenderError
from .model import PackageType, qualify


class TypeRegistry:
    """Qualified name -> PackageType, in scan order.

    The model builder is the only writer; it freezes the registry before
    handing it to a renderer.
    """

    def __init__(self) -> None:
        self._types: dict[str, PackageType] = {}
        self._frozen = False

    def add(self, pt: PackageType) -> None:
        if self._frozen:
            raise RegistryFrozenError(f"cannot add {pt.qualified_name}: registry is frozen")
        # Re-declaration keeps the original slot so output order stays stable.
        self._types[pt.qualified_name] = pt

    def freeze(self) -> "TypeRegistry":
        self._frozen = True
        return self

    @property
    def frozen(self) -> bool:
        return self._frozen

    def get(self, name: str) -> PackageType | None:
        return self._types.get(name)

    def resolve(self, package: str, name: str) -> PackageType | None:
        return self._types.get(qualify(package, name))

    def __getitem__(self, name: str) -> PackageType:
        return self._types[name]

    def __contains__(self, name: object) -> bool:
        return name in self._types

    def __iter__(self) -> Iterator[PackageType]:
        return iter(self._types.values())

    def __len__(self) -> int:
        return len(self._types)

    def exported(self) -> list[PackageType]:
        return [pt for pt in self._types.values() if pt.exported]

    def render_names(self, diagnostics: Diagnostics | None = None) -> dict[str, str]:
        """Output identifier for every exported type.

        Short names are used unless two packages export the same one; those
        are prefixed with their package name.
        """
        by_short: dict[str, list[PackageType]] = {}
        for pt in self.exported():
            by_short.setdefault(pt.name, []).append(pt)

        names: dict[str, str] = {}
        for short, pts in by_short.items():
            if len(pts) == 1:
                names[pts[0].qualified_name] = short
                continue
            for pt in pts:
                names[pt.qualified_name] = _package_prefix(pt.package) + short
            if diagnostics is not None:
                diagnostics.warn(
                    NameCollisionWarning,
                    f"{short} is exported by {len(pts)} packages; rendering as "
                    + ", ".join(names[pt.qualified_name] for pt in pts),
                )

        seen: dict[str, str] = {}
        for qualified, token in names.items():
            other = seen.get(token)
            if other is not None:
                raise RenderError(f"{qualified} and {other} both render as {token}")
            seen[token] = qualified
        return names


def _package_prefix(package: str) -> str:
    return "".join(part[:1].upper() + part[1:] for part in package.split("_") if part)
