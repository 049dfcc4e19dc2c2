"""Domain layer for microledger: entities, errors and ledger services.

Services live in their own modules (``microledger.domain.journal`` and so
on); this package does not import them so that the database layer can
import ``microledger.domain.entities`` without a cycle.
"""
