import uuid

# Extension -> language tag for File nodes
LANGUAGE_MAP = {
    'py': 'python',
    'js': 'javascript',
    'jsx': 'javascript',
    'ts': 'typescript',
    'tsx': 'typescript',
    'css': 'css',
    'html': 'html',
    'md': 'markdown',
    'json': 'json',
    'sh': 'shell',
    'java': 'java',
    'rs': 'rust',
    'rust': 'rust',
    'go': 'go',
    'rb': 'ruby',
    'yml': 'yaml',
}

DEFAULT_LANGUAGE = 'plaintext'


def get_extension(name: str) -> str:
    """Returns the text after the last dot of a leaf name, lowercased ('' if none)"""
    if '.' not in name:
        return ''
    return name.rsplit('.', 1)[1].lower()


def language_for_name(name: str) -> str:
    """
    Classify a file by its extension.

    Examples:
        - 'main.py' -> 'python'
        - 'src/App.tsx' -> 'typescript'
        - 'README' -> 'plaintext'
    """
    return LANGUAGE_MAP.get(get_extension(name), DEFAULT_LANGUAGE)


def new_node_id(prefix: str = "") -> str:
    """Returns an opaque id that is unique across the graph"""
    token = uuid.uuid4().hex[:12]
    return f"{prefix}-{token}" if prefix else token
