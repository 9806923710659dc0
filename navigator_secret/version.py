"""Navigator Secret Meta information.
   Navigator Secret provisions the session signing secret and migrates
   sessions across secret rotations.
"""
__title__ = 'navigator_secret'
__description__ = (
   'Navigator Secret provisions session signing secrets '
   'and migrates sessions across secret rotations.'
)
__version__ = '0.2.0'
__copyright__ = 'Copyright (c) 2023 Jesus Lara'
__author__ = 'Jesus Lara'
__author_email__ = 'jesuslarag@gmail.com'
__license__ = 'Apache-2.0'
__url__ = 'https://github.com/phenobarbital/navigator-secret'
