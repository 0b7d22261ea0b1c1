"""Domain layer for projectledger.

Services live in their own modules (projectledger.domain.journal, ...); this
package does not import them so the database layer can import entities
without a cycle.
"""
