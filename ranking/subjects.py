"""
Subject classification for the ranking engine
Tags each subject as Common or Main and fixes the canonical display order
"""

COMMON_STREAM = 'Common'


def read_field(source, *names, default=None):
    """Read the first present field from a mapping or an object"""
    for name in names:
        if isinstance(source, dict):
            if name in source:
                return source[name]
        elif hasattr(source, name):
            return getattr(source, name)
    return default


class SubjectInfo(object):
    """Read-only view of a subject as the engine sees it"""
    __slots__ = ('id', 'name', 'code', 'stream', 'is_common')

    def __init__(self, id, name, code, stream):
        self.id = id
        self.name = name
        self.code = code
        self.stream = stream
        self.is_common = stream == COMMON_STREAM

    @classmethod
    def from_source(cls, source):
        """Build from a dict or a Subject model instance"""
        if isinstance(source, cls):
            return source
        return cls(
            id=read_field(source, 'id', 'subject_id'),
            name=read_field(source, 'name', 'subject_name', default=''),
            code=read_field(source, 'code', 'subject_code', default=''),
            stream=read_field(source, 'stream'),
        )

    def sort_key(self):
        return (str(self.stream or ''), str(self.name or ''), str(self.id))

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'code': self.code,
            'stream': self.stream,
            'is_common': self.is_common,
        }

    def __repr__(self):
        return f'<SubjectInfo {self.code}: {self.name} ({self.stream})>'


def classify_subjects(subjects):
    """Return SubjectInfo objects in canonical display order.

    Duplicate ids keep their first occurrence.
    """
    seen = set()
    classified = []
    for source in subjects or []:
        info = SubjectInfo.from_source(source)
        if info.id in seen:
            continue
        seen.add(info.id)
        classified.append(info)
    return sorted(classified, key=SubjectInfo.sort_key)
