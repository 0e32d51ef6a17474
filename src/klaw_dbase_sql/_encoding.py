from __future__ import annotations


class ValidEncoding:
    """Class to represent valid encodings."""

    def __init__(self, value: str | list[str], codec: str, errors: str = 'strict') -> None:
        self.value = value
        self.codec = codec
        self.errors = errors

    def __str__(self) -> str:
        return self.codec

    def __repr__(self) -> str:
        return f'ValidEncoding({self.value!r}, {self.codec!r}, {self.errors!r})'

    def values(self) -> list[str]:
        if isinstance(self.value, str):
            return [self.value]
        else:
            return self.value


_supported_encodings = {
    'utf8': ValidEncoding(['utf8', 'utf-8'], 'utf-8'),
    'utf8-lossy': ValidEncoding(['utf8-lossy', 'utf-8-lossy'], 'utf-8', 'replace'),
    'ascii': ValidEncoding(['ascii'], 'ascii'),
    'cp1252': ValidEncoding(['cp1252', 'windows-1252'], 'cp1252'),
    'cp850': ValidEncoding(['cp850', 'dos-850'], 'cp850'),
    'cp437': ValidEncoding(['cp437', 'dos-437'], 'cp437'),
    'cp852': ValidEncoding(['cp852', 'dos-852'], 'cp852'),
    'cp866': ValidEncoding(['cp866', 'dos-866'], 'cp866'),
    'cp865': ValidEncoding(['cp865', 'dos-865'], 'cp865'),
    'cp861': ValidEncoding(['cp861', 'dos-861'], 'cp861'),
    'cp874': ValidEncoding(['cp874', 'dos-874'], 'cp874'),
    'cp1255': ValidEncoding(['cp1255', 'windows-1255'], 'cp1255'),
    'cp1256': ValidEncoding(['cp1256', 'windows-1256'], 'cp1256'),
    'cp1250': ValidEncoding(['cp1250', 'windows-1250'], 'cp1250'),
    'cp1251': ValidEncoding(['cp1251', 'windows-1251'], 'cp1251'),
    'cp1254': ValidEncoding(['cp1254', 'windows-1254'], 'cp1254'),
    'cp1253': ValidEncoding(['cp1253', 'windows-1253'], 'cp1253'),
    'gbk': ValidEncoding(['gbk', 'gb2312'], 'gbk'),
    'big5': ValidEncoding(['big5'], 'big5'),
    'shift_jis': ValidEncoding(['shift_jis', 'sjis'], 'shift_jis'),
    'euc-jp': ValidEncoding(['euc-jp'], 'euc_jp'),
    'euc-kr': ValidEncoding(['euc-kr'], 'euc_kr'),
}


def _list_valid_encodings() -> list[str]:
    """List all valid encoding names and aliases."""
    valid_encodings = []

    for encoding in _supported_encodings.values():
        valid_encodings.extend(encoding.values())

    return valid_encodings


def validate_encoding(encoding: str | None) -> bool:
    """Check whether an encoding name or alias is supported."""
    if encoding is None:
        return False

    return encoding.lower() in _list_valid_encodings()


def resolve_encoding(encoding: str) -> ValidEncoding:
    """Map an encoding name or alias to the Python codec used to decode text fields.

    Raises:
        KeyError: If the encoding is not supported.
    """
    name = encoding.lower()
    for candidate in _supported_encodings.values():
        if name in candidate.values():
            return candidate
    raise KeyError(encoding)
