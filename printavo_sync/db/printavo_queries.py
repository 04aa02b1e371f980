"""
GraphQL operations for the Printavo v2 API.

Each selection set matches the response models in
`printavo_sync.api.v1.schemas.printavo_schemas`.
"""

# Lookup of primary contacts by email; results are matched client-side
FIND_CONTACT_BY_EMAIL_QUERY = """
query FindPrimaryContactByEmail($q: String!) {
  contacts(query: $q, primaryOnly: true, first: 5) {
    nodes {
      id
      firstName
      lastName
      customer {
        id
        companyName
      }
      emails {
        email
      }
    }
  }
}
"""

CREATE_CUSTOMER_MUTATION = """
mutation CreateCustomer($input: CustomerCreateInput!) {
  customerCreate(input: $input) {
    customer {
      id
      companyName
      primaryContact {
        id
        emails {
          email
        }
      }
    }
  }
}
"""

CREATE_QUOTE_MUTATION = """
mutation CreateQuote($input: QuoteCreateInput!) {
  quoteCreate(input: $input) {
    quote {
      id
      nickname
      contact {
        id
      }
      lineItemGroups {
        id
        position
        lineItems {
          id
          description
          itemNumber
        }
      }
    }
  }
}
"""

# Cheapest valid query; used to validate an API key
CONNECTION_TEST_QUERY = """
query TestConnection {
  __typename
}
"""

__all__ = [
    "FIND_CONTACT_BY_EMAIL_QUERY",
    "CREATE_CUSTOMER_MUTATION",
    "CREATE_QUOTE_MUTATION",
    "CONNECTION_TEST_QUERY",
]
