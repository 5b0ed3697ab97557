from pass_service.models.registrant import Registrant, PURPOSES, ENTRY_CAP

__all__ = ['Registrant', 'PURPOSES', 'ENTRY_CAP']
