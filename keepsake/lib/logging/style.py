from pygments.style import Style
from pygments.token import Keyword, Name, Number, Punctuation, String


class LogStyle(Style):
    styles = {
        Keyword.Constant: "ansimagenta",
        Name.Tag: "ansicyan",
        Number: "ansiyellow",
        Punctuation: "ansibrightblack",
        String.Double: "ansigreen",
    }
