'''
author: zyx
date: 2026-10-16
last_modified: 2026-10-16
description:
    Exceptions raised by lmseg operations
'''


class MissingReferenceError(ValueError):
    '''
    An operation that needs a reference or seed grid was called without one.
    '''


class ParameterError(ValueError):
    '''
    A segmentation parameter is missing, malformed or out of range.
    '''
