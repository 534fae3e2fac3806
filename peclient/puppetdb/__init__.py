"""PuppetDB query API client, data types and pagination."""