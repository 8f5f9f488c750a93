"""Cash Card Service.

This service provides APIs for card owners to:
- Create cash cards bound to their own identity
- Read, update and delete their own cards
- Page through their cards sorted by amount or id
"""

__version__ = "0.1.0"
