import argparse
import logging
import os
import sys

from . import BMGError, MESGFile, entries_to_xml, xml_to_entries

log = logging.getLogger(__name__)

def read_file(fname):
    with open(fname, 'rb') as f:
        return f.read()

def write_file(fname, data):
    # output files are only readable and writable by the user
    fd = os.open(fname, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
    with open(fd, 'wb') as of:
        of.write(data)

def to_xml(fname, ofname):
    mesg = MESGFile.from_bytes(read_file(fname))
    write_file(ofname, entries_to_xml(mesg.entries))
    return len(mesg.entries)

def to_bmg(fname, ofname):
    mesg = MESGFile(xml_to_entries(read_file(fname)))
    write_file(ofname, mesg.to_bytes())
    return len(mesg.entries)

ACTIONS = {
    'toXML': to_xml,
    'toBMG': to_bmg,
}

def main(argv=None):
    p = argparse.ArgumentParser(prog='bmgconv', description="Convert BMG message files to editable XML and vice versa.")
    p.add_argument('action', choices=list(ACTIONS), help="toXML: BMG -> XML, toBMG: XML -> BMG")
    p.add_argument('input', help="Path to the file to convert")
    p.add_argument('output', help="Path to write the converted file to")
    p.add_argument('-v', '--verbose', action='store_true', help="Print debug diagnostics")

    args = p.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s: %(name)s: %(message)s",
        stream=sys.stderr,
    )

    try:
        count = ACTIONS[args.action](args.input, args.output)
    except BMGError as e:
        log.debug("conversion failed", exc_info=True)
        print("error: {}: {}".format(e.kind, e), file=sys.stderr)
        sys.exit(1)
    except OSError as e:
        print("error: {}".format(e), file=sys.stderr)
        sys.exit(1)

    print("Converted {} messages from {} to {}".format(count, args.input, args.output))
