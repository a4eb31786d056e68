"""
Reconciles expected annotations with the messages the compiler emitted.
"""
import logging
from typing import List, Optional

from .records import Annotations, Messages, Mismatch, Mismatches
from .utils.kind import KINDS, Kind
from .utils.span import LineMap, iter_lines, sorted_items

logger = logging.getLogger(__name__)


def is_substring(annotation: str, message: str) -> bool:
    """
    Is every line of the annotation contained, in order, in the lines of the
    message? Each message line is looked at once, moving forward only.

        >>> is_substring("mismatched types\\nfound `u8`",
        ...              "mismatched types:\\n expected `i8`,\\n    found `u8`")
        True
    """
    ann_lines = [line for _, line in iter_lines(annotation)]
    i = 0
    for _, msg_line in iter_lines(message):
        if i == len(ann_lines):
            return True
        if ann_lines[i] in msg_line:
            i += 1
    return i == len(ann_lines)


def compare(annotations: List[str], messages: List[str]) -> Optional[Mismatch]:
    """
    First-fit pairing in original order: an annotation claims the first
    still-unclaimed message that contains it.
    """
    matched_anns = [False] * len(annotations)
    matched_msgs = [False] * len(messages)

    for i, ann in enumerate(annotations):
        for j, msg in enumerate(messages):
            if not matched_anns[i] and not matched_msgs[j] and is_substring(ann, msg):
                matched_anns[i] = True
                matched_msgs[j] = True

    if all(matched_anns) and all(matched_msgs):
        return None

    return Mismatch(
        annotations=[a for a, ok in zip(annotations, matched_anns) if not ok],
        messages=[m for m, ok in zip(messages, matched_msgs) if not ok],
    )


def compare_opt(annotations: Optional[List[str]], messages: Optional[List[str]]) -> Optional[Mismatch]:
    if annotations is None and messages is None:
        return None
    if messages is None:
        return Mismatch(annotations=list(annotations))
    if annotations is None:
        return Mismatch(messages=list(messages))
    return compare(annotations, messages)


def match(annotations: LineMap[Annotations], messages: LineMap[Messages]) -> Mismatches:
    """
    Sorted merge-join of both line maps, each entry read once;
    neither map is modified. Never raises.
    """
    mismatches = Mismatches()

    anns = sorted_items(annotations)
    msgs = sorted_items(messages)
    a = m = 0

    while a < len(anns) or m < len(msgs):
        if m == len(msgs) or (a < len(anns) and anns[a][0] < msgs[m][0]):
            line, line_anns = anns[a]
            mismatches.push_annotations(line, line_anns)
            a += 1
        elif a == len(anns) or msgs[m][0] < anns[a][0]:
            line, line_msgs = msgs[m]
            mismatches.push_messages(line, line_msgs)
            m += 1
        else:
            line, line_anns = anns[a]
            _, line_msgs = msgs[m]
            for kind in KINDS:
                mismatch = compare_opt(line_anns.get(kind), line_msgs.get(kind))
                if mismatch is not None:
                    mismatches.insert(kind, (line, mismatch))
            a += 1
            m += 1

    logger.debug("mismatched kinds: %s", [str(k) for k in mismatches.kinds()])
    return mismatches


def is_passing(mismatches: Mismatches) -> bool:
    """Only error and warning mismatches fail a file."""
    return mismatches.get(Kind.ERROR) is None and mismatches.get(Kind.WARNING) is None


def format_mismatches(mismatches: Mismatches) -> str:
    """
    Human readable report, by kind in report order then by line:

        3: unmatched warning annotations
         "unused variable"
        5: mismatched error annotations
         expected: "cannot find type"
            found: "mismatched types"
    """
    out = []
    for kind, entries in mismatches.items():
        for line, mismatch in entries:
            if not mismatch.annotations:
                out.append(f"{line}: unmatched {kind.value} messages\n")
                out.extend(f" {quote(msg)}\n" for msg in mismatch.messages)
            elif not mismatch.messages:
                out.append(f"{line}: unmatched {kind.value} annotations\n")
                out.extend(f" {quote(ann)}\n" for ann in mismatch.annotations)
            else:
                out.append(f"{line}: mismatched {kind.value} annotations\n")
                out.extend(f" expected: {quote(ann)}\n" for ann in mismatch.annotations)
                out.extend(f"    found: {quote(msg)}\n" for msg in mismatch.messages)
    return "".join(out)


_ESCAPES = {"\\": "\\\\", '"': '\\"', "\n": "\\n", "\r": "\\r", "\t": "\\t", "\0": "\\0"}
_UNESCAPES = {v[1]: k for k, v in _ESCAPES.items()}


def _escape(c: str) -> str:
    if c in _ESCAPES:
        return _ESCAPES[c]
    if not c.isprintable():
        return f"\\u{{{ord(c):x}}}"
    return c


def quote(text: str) -> str:
    """
    Double-quoted, single-line rendering of `text`. Control and other
    non-printable characters come out as `\\u{1b}`.
    """
    return '"' + "".join(_escape(c) for c in text) + '"'


def unquote(quoted: str) -> str:
    """Inverse of `quote`."""
    if len(quoted) < 2 or quoted[0] != '"' or quoted[-1] != '"':
        raise ValueError(f"not a quoted string: {quoted!r}")
    body = quoted[1:-1]
    out = []
    i = 0
    while i < len(body):
        c = body[i]
        i += 1
        if c != "\\":
            out.append(c)
            continue
        esc = body[i:i + 1]
        i += 1
        if esc in _UNESCAPES:
            out.append(_UNESCAPES[esc])
        elif esc == "u" and body[i:i + 1] == "{":
            end = body.find("}", i)
            if end == -1:
                raise ValueError(f"bad escape in {quoted!r}")
            try:
                out.append(chr(int(body[i + 1:end], 16)))
            except ValueError:
                raise ValueError(f"bad escape in {quoted!r}") from None
            i = end + 1
        else:
            raise ValueError(f"bad escape in {quoted!r}")
    return "".join(out)
