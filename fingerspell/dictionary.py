"""
Built-in correction table and vocabulary for fingerspelled words.
"""
from pathlib import Path
from typing import Dict, FrozenSet, Tuple

import yaml

# Frequent fingerspelling slips and common misspellings
DEFAULT_CORRECTIONS: Dict[str, str] = {
    # letter-order confusions
    "teh": "the",
    "hte": "the",
    "adn": "and",
    "nad": "and",
    "thsi": "this",
    "taht": "that",
    "waht": "what",
    "wiht": "with",
    "wnat": "want",
    "hvae": "have",
    "cna": "can",
    "yuo": "you",
    "yuor": "your",
    "jsut": "just",
    "dont": "don't",
    "cant": "can't",
    "wont": "won't",
    "im": "i'm",
    "ill": "i'll",
    "helo": "hello",
    "helllo": "hello",
    "hllo": "hello",
    "thankks": "thanks",
    "thanx": "thanks",
    "plz": "please",
    "pls": "please",
    "sry": "sorry",
    "srry": "sorry",
    # spelling
    "becuase": "because",
    "beacuse": "because",
    "freind": "friend",
    "frend": "friend",
    "recieve": "receive",
    "recive": "receive",
    "beleive": "believe",
    "belive": "believe",
    "occured": "occurred",
    "seperate": "separate",
    "definately": "definitely",
    "tommorrow": "tomorrow",
    "tonite": "tonight",
    "untill": "until",
    "thier": "their",
    "occassion": "occasion",
    "embarass": "embarrass",
    "realy": "really",
    "goverment": "government",
    "enviroment": "environment",
}

DEFAULT_VOCABULARY: FrozenSet[str] = frozenset("""
i me my you your he him his she her it its we us our they them their
am is are was were be been being have has had do does did done
will would should could can may might go goes went come comes came
get gets got give gives gave make makes made take takes took
see sees saw know knows knew think thinks thought want wants wanted
need needs needed like likes liked love loves loved help helps helped
use uses used work works worked try tries tried ask asks asked
feel feels felt become becomes became leave leaves left put puts call calls called
the a an and or but if as of at by for with from to in on off out up down
about over under again then than so such
what when where who whom whose which why how
one two three four five six seven eight nine ten first second third last next
today tomorrow yesterday now later soon never
morning afternoon evening night day week month year time hour minute
good great bad new old big small long short high low hot cold warm cool fast slow
easy hard happy sad nice pretty beautiful right wrong true false sure okay ok fine
ready busy free full empty open close closed
man woman boy girl person people child children friend family dad mom parent brother sister
home house room door window car phone computer food water school place thing way life
world hand eye face head body heart
please thank thanks sorry excuse welcome yes no hello hi hey bye goodbye goodnight
talk speak say tell sign show look watch hear listen understand mean wait stop start
meet video chat message text
""".split())


def load_dictionary(path: str) -> Tuple[Dict[str, str], FrozenSet[str]]:
    """
    Read extra corrections and words from a YAML file.

    The file holds a ``corrections`` mapping and a ``words`` list; both are
    optional. Keys and words are lowercased.
    """
    dict_path = Path(path)
    if not dict_path.exists():
        raise FileNotFoundError(f"Dictionary file not found: {dict_path}")

    with open(dict_path, 'r') as f:
        data = yaml.safe_load(f) or {}

    unknown = sorted(set(data) - {"corrections", "words"})
    if unknown:
        raise ValueError(f"Unknown keys in dictionary file: {', '.join(unknown)}")

    corrections = {}
    for k, v in (data.get("corrections") or {}).items():
        value = "" if v is None else str(v).strip()
        if not value:
            raise ValueError(f"Blank correction for '{k}' in dictionary file")
        corrections[str(k).lower()] = value
    words = frozenset(str(w).lower() for w in (data.get("words") or []))
    return corrections, words
