#!/usr/bin/env python3
import logging
import re
import sys
import xml.etree.ElementTree as ET
import xml.dom.minidom as md
from argparse import ArgumentParser, FileType
from pathlib import Path

from formtool.errors import FormError
from formtool.extract import extract
from formtool.form import decode
from formtool.records import DecodeConfig

logger = logging.getLogger("formtool")

def to_hex(string):
    return ''.join(format(x, '02x') for x in string)

# Anything outside XML 1.0's Char production makes minidom choke; hex those.
INVALID_XML = re.compile("[^\t\n\r\x20-\ud7ff\ue000-\ufffd\U00010000-\U0010ffff]")

def to_text(value):
    if isinstance(value, bytes):
        text = value.decode("utf-8", "backslashreplace")
        if INVALID_XML.search(text):
            return to_hex(value)
        return text
    return str(value)

def element(name, attrib={}, text=None):
    elem = ET.Element(name, attrib)
    if not text is None:
        elem.text = to_text(text)
    return elem

def record_element(record):
    node = element(type(record).__name__)
    for field, value in zip(record._fields, record):
        if isinstance(value, tuple) and value and hasattr(value[0], "_fields"):
            for child in value:
                node.append(record_element(child))
        elif isinstance(value, tuple):
            node.set(field, " ".join(str(x) for x in value))
        else:
            node.set(field, to_text(value))
    return node

def to_xml(store):
    root = element("FORM", {"_length": str(store.total_length)})
    for tag, length in store.section_lengths.items():
        node = element(tag, {"_length": str(length)})
        if tag in store.counts:
            node.set("count", str(store.counts[tag]))
        for record in store[tag]:
            node.append(record_element(record))
        root.append(node)
    return root

argparser = ArgumentParser(prog="formtool",
    description="Decode a FORM asset archive and extract its resources")
argparser.add_argument("file", type=FileType("rb"))
argparser.add_argument("out", type=Path, nargs="?",
    help="directory to extract resources into")
argparser.add_argument("--chunk", dest="chunk_filter", metavar="TAG",
    help="only decode this chunk")
argparser.add_argument("--no-extract", dest="extract_blobs", action="store_false",
    help="decode and list only, write no resource files")
argparser.add_argument("--xml", type=Path, help="write the listing here instead of stdout")
argparser.add_argument("--debug", action="store_true")

def main(argv=None):
    args = argparser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        with args.file as fd:
            config = DecodeConfig(args.chunk_filter, args.extract_blobs)
            store = decode(fd, config)

            text = md.parseString(ET.tostring(to_xml(store))).toprettyxml()
            if args.xml:
                args.xml.write_text(text, encoding="utf-8")
            else:
                sys.stdout.write(text)

            if args.out:
                extract(fd, store, args.out, config)
    except FormError as e:
        logger.error("%s: %s", args.file.name, e)
        return 1
    return 0

if __name__ == "__main__":
    sys.exit(main())
