"""
Sequencer GraphQL queries.

Account-scoped archive queries. Neither offers paging: each call returns
the full currently-visible history for the account.
"""

EVENTS_QUERY = """
query Events($input: EventFilterOptionsInput!) {
  events(input: $input) {
    blockInfo {
      height
      stateHash
      parentHash
      timestamp
      globalSlotSinceGenesis
    }
    transactionInfo {
      hash
      memo
      status
      sequenceNo
      zkappAccountUpdateIds
    }
    eventData {
      data
    }
  }
}
"""

ACTIONS_QUERY = """
query Actions($input: ActionFilterOptionsInput!) {
  actions(input: $input) {
    blockInfo {
      height
      stateHash
      parentHash
      timestamp
      globalSlotSinceGenesis
    }
    transactionInfo {
      hash
      memo
      status
      sequenceNo
      zkappAccountUpdateIds
    }
    actionState {
      actionStateOne
      actionStateTwo
    }
    actionData {
      data
    }
  }
}
"""


def events_variables(public_key: str, token_id: str | None) -> dict:
    """Variables for EVENTS_QUERY."""
    return {"input": {"address": public_key, "tokenId": token_id}}


def actions_variables(public_key: str, token_id: str | None) -> dict:
    """Variables for ACTIONS_QUERY (whole action-state range)."""
    return {
        "input": {
            "address": public_key,
            "tokenId": token_id,
            "fromActionState": None,
            "endActionState": None,
        }
    }
