from abc import ABC, abstractmethod


class AbstractSheetsClient(ABC):
	"""Interface for clients reading a cell range from a spreadsheet."""

	@abstractmethod
	async def fetch_values(self, spreadsheet_id: str, cell_range: str) -> list[list[str]]:
		"""Read the raw rows of a cell range.

		Args:
			spreadsheet_id: Identifier of the spreadsheet (table ID).
			cell_range: Range in A1 notation, optionally sheet-qualified.

		Returns:
			list[list[str]]: Rows as lists of cell strings; trailing empty
			cells may be omitted, so rows can be shorter than the range.

		Raises:
			ConfigurationAppError: If the client is missing its credential.
			UpstreamAppError: If the origin call fails or answers non-success.
		"""
		...
