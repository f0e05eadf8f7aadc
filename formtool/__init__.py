from formtool.errors import *
from formtool.records import *
from formtool.form import decode
from formtool.extract import extract
