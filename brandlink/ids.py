"""Primary key generation for teams and links."""

import secrets
import string
import uuid
from typing import Optional


class IdGenerator:
    """Generate opaque, URL-safe primary keys."""
    
    # Base36 characters (lowercase alphanumeric)
    BASE36_CHARS = string.digits + string.ascii_lowercase
    
    def __init__(self, default_length: int = 12):
        """Initialize id generator.
        
        Args:
            default_length: Default length for generated ids
        """
        self.default_length = default_length
    
    def generate_random(self, length: Optional[int] = None) -> str:
        """Generate a random id from a cryptographic source.
        
        Args:
            length: Length of the id (uses default if not specified)
            
        Returns:
            Random lowercase alphanumeric id
        """
        length = length or self.default_length
        return ''.join(secrets.choice(self.BASE36_CHARS) for _ in range(length))
    
    def generate_from_uuid(self, length: Optional[int] = None) -> str:
        """Generate id from a UUID4.
        
        Args:
            length: Length of the id (uses default if not specified)
            
        Returns:
            Id based on UUID
        """
        length = length or self.default_length
        return self._int_to_base36(uuid.uuid4().int)[:length]
    
    def link_id(self) -> str:
        return self.generate_random()
    
    def team_id(self) -> str:
        return self.generate_from_uuid(length=16)
    
    def _int_to_base36(self, num: int) -> str:
        """Convert integer to base36 string."""
        if num == 0:
            return self.BASE36_CHARS[0]
        
        result = []
        base = len(self.BASE36_CHARS)
        
        while num > 0:
            num, remainder = divmod(num, base)
            result.append(self.BASE36_CHARS[remainder])
        
        return ''.join(reversed(result))
