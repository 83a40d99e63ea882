"""
Class docblock writer.

Merges PropertyAnnotation objects into the docblock directly above the
first class declaration of a PHP file: existing annotations for the same
property get their type replaced, missing ones are appended before the
closing ``*/``, and a new docblock is created when the class has none.
"""

import logging
import re
from typing import Dict, List, Optional, Tuple

from .annotations import PROPERTY_TAGS, AnnotationFactory, PropertyAnnotation
from .base import write_file
from .tokenizer import T_CLASS, T_DOC_COMMENT_CLOSE_TAG, tokenize_php

logger = logging.getLogger(__name__)

_DOC_LINE_PREFIX_RE = re.compile(r'^(\s*(?:/\*\*)?\s*\*?\s?)')


def _newline_of(content: str) -> str:
    return '\r\n' if '\r\n' in content else '\n'


def _doc_line_text(line: str) -> str:
    """Annotation text of a docblock line without ``/**``, ``*`` and ``*/``."""
    text = line.rstrip('\r\n')
    text = re.sub(r'\*/\s*$', '', text)
    return _DOC_LINE_PREFIX_RE.sub('', text, count=1).strip()


class DocBlockWriter:
    """Write annotations into a class docblock."""

    def __init__(self, dry_run: bool = False):
        self.dry_run = dry_run

    def write(self, path: str, content: str,
              annotations: List[PropertyAnnotation]) -> Dict:
        """Update the file at path and report what changed.

        Returns:
            Dict with ``added``, ``updated``, ``changed`` and the resulting
            ``content``.
        """
        new_content, added, updated = self.apply(content, annotations)
        changed = new_content != content
        if changed and not self.dry_run:
            write_file(path, new_content)
            logger.info("%s: %d added, %d updated", path, added, updated)
        return {
            'added': added,
            'updated': updated,
            'changed': changed,
            'content': new_content,
        }

    def apply(self, content: str,
              annotations: List[PropertyAnnotation]) -> Tuple[str, int, int]:
        """Return (new_content, added, updated) without touching the disk."""
        if not annotations:
            return content, 0, 0

        stream = tokenize_php(content)
        class_index = stream.find_next(T_CLASS, 0)
        if class_index is None:
            logger.debug("No class declaration found, nothing to annotate")
            return content, 0, 0

        newline = _newline_of(content)
        lines = re.findall(r'[^\n]*\n|[^\n]+$', content)
        class_line = stream[stream.first_in_line(class_index)].line

        doc_close = stream.find_previous_non_whitespace(stream.first_in_line(class_index) - 1)
        if doc_close is None or stream[doc_close].kind != T_DOC_COMMENT_CLOSE_TAG \
                or stream[doc_close].comment_opener is None:
            indent = re.match(r'[ \t]*', lines[class_line - 1]).group(0)
            block = [f'{indent}/**{newline}']
            block += [f'{indent} * {a.build()}{newline}' for a in annotations]
            block.append(f'{indent} */{newline}')
            lines[class_line - 1:class_line - 1] = block
            return ''.join(lines), len(annotations), 0

        first = stream[stream[doc_close].comment_opener].line - 1
        last = stream[doc_close].line - 1
        if first == last:
            first, last, lines = self._expand_single_line(lines, first, newline)

        existing = self._existing_annotations(lines, first, last)
        indent = re.match(r'[ \t]*', lines[last]).group(0)

        added = updated = 0
        additions = []
        for annotation in annotations:
            found = self._find_existing(existing, annotation)
            if found is None:
                additions.append(f'{indent}* {annotation.build()}{newline}')
                added += 1
                continue

            line_index, current = found
            if current.tag != annotation.tag or current.type == annotation.type:
                continue
            replacement = PropertyAnnotation(current.tag, annotation.type,
                                             current.property, current.description)
            old_line = lines[line_index]
            prefix = old_line[:old_line.index(current.tag)]
            ending = old_line[len(old_line.rstrip('\r\n')):]
            lines[line_index] = f'{prefix}{replacement.build()}{ending}'
            updated += 1

        lines[last:last] = additions
        return ''.join(lines), added, updated

    @staticmethod
    def _expand_single_line(lines: List[str], index: int,
                            newline: str) -> Tuple[int, int, List[str]]:
        """Turn ``/** Text */`` into a three line docblock."""
        line = lines[index]
        indent = re.match(r'[ \t]*', line).group(0)
        text = _doc_line_text(line)
        block = [f'{indent}/**{newline}']
        if text:
            block.append(f'{indent} * {text}{newline}')
        block.append(f'{indent} */{newline}')
        lines = lines[:index] + block + lines[index + 1:]
        return index, index + len(block) - 1, lines

    @staticmethod
    def _existing_annotations(lines: List[str], first: int,
                              last: int) -> List[Tuple[int, PropertyAnnotation]]:
        existing = []
        for i in range(first, last + 1):
            text = _doc_line_text(lines[i])
            if not text.startswith(PROPERTY_TAGS):
                continue
            annotation = AnnotationFactory.create_from_string(text)
            if annotation is not None:
                existing.append((i, annotation))
        return existing

    @staticmethod
    def _find_existing(existing: List[Tuple[int, PropertyAnnotation]],
                       annotation: PropertyAnnotation) -> Optional[Tuple[int, PropertyAnnotation]]:
        for line_index, current in existing:
            if current.property == annotation.property:
                return line_index, current
        return None
