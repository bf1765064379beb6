from sitecms.db.repositories.entities import EntityRepository

__all__ = ['EntityRepository']
