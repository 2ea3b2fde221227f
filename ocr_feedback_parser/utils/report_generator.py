"""
Processing summary and reporting utilities for OCR feedback parser system.
Generates reports of processed inputs, extracted feedback, errors, and statistics.
"""
import json
from datetime import datetime
from pathlib import Path
from typing import Dict, Any, List, Optional
import logging

from ..models.feedback_data import Category, ProcessingResult


class ReportGenerator:
    """
    Generates processing reports and statistics for feedback extraction runs.
    Covers per-input outcomes, feedback counts per category, parser warnings
    and error patterns.
    """

    def __init__(self, logger: Optional[logging.Logger] = None):
        """
        Initialize report generator.

        Args:
            logger: Logger instance (optional, creates default if not provided)
        """
        self.logger = logger or logging.getLogger(__name__)

    def generate_processing_report(self,
                                   processing_results: List[ProcessingResult],
                                   processing_stats: Dict[str, Any],
                                   error_summary: Dict[str, Any],
                                   output_file: Optional[str] = None) -> Dict[str, Any]:
        """
        Generate processing report with statistics and analysis.

        Args:
            processing_results: List of processing results from batch operation
            processing_stats: Processing statistics dictionary
            error_summary: Error summary from error handler
            output_file: Optional path to save report as JSON file

        Returns:
            Dict containing the processing report
        """
        self.logger.info("Generating processing report")

        report = {
            'report_metadata': self._generate_report_metadata(),
            'processing_summary': self._generate_processing_summary(processing_stats),
            'file_analysis': self._analyze_file_results(processing_results),
            'feedback_analysis': self._analyze_feedback(processing_results),
            'error_analysis': self._analyze_errors(processing_results, error_summary),
            'performance_metrics': self._calculate_performance_metrics(processing_stats, processing_results),
            'recommendations': self._generate_recommendations(processing_results, error_summary),
            'detailed_results': self._format_detailed_results(processing_results)
        }

        if output_file:
            self._save_report_to_file(report, output_file)

        self.logger.info(f"Processing report generated with {len(processing_results)} file results")
        return report

    def _generate_report_metadata(self) -> Dict[str, Any]:
        """Generate report metadata information."""
        return {
            'report_generated_at': datetime.now().isoformat(),
            'report_version': '1.0',
            'generator': 'OCRFeedbackParser ReportGenerator'
        }

    def _generate_processing_summary(self, stats: Dict[str, Any]) -> Dict[str, Any]:
        """Generate high-level processing summary."""
        total_processed = stats.get('successful', 0) + stats.get('failed', 0) + stats.get('errors', 0)
        success_rate = (stats.get('successful', 0) / total_processed * 100) if total_processed > 0 else 0

        return {
            'total_files_found': stats.get('total_files', 0),
            'total_files_processed': total_processed,
            'successful_extractions': stats.get('successful', 0),
            'failed_extractions': stats.get('failed', 0),
            'processing_errors': stats.get('errors', 0),
            'feedback_records_extracted': stats.get('records_extracted', 0),
            'success_rate_percent': round(success_rate, 2),
            'processing_duration_seconds': stats.get('processing_duration', 0),
            'processing_start_time': stats.get('start_time').isoformat() if stats.get('start_time') else None,
            'processing_end_time': stats.get('end_time').isoformat() if stats.get('end_time') else None
        }

    def _analyze_file_results(self, results: List[ProcessingResult]) -> Dict[str, Any]:
        """Analyze file processing results by status and input type."""
        if not results:
            return {'total_files': 0, 'status_breakdown': {}, 'file_types_processed': {}}

        status_counts = {'pass': 0, 'fail': 0, 'error': 0}
        for result in results:
            status_counts[result.status] = status_counts.get(result.status, 0) + 1

        file_types = {}
        for result in results:
            if result.file_name:
                extension = Path(result.file_name).suffix.lower()
                file_types[extension] = file_types.get(extension, 0) + 1

        text_lengths = [r.text_length for r in results if r.text_length]

        return {
            'total_files': len(results),
            'status_breakdown': status_counts,
            'file_types_processed': file_types,
            'average_text_length': round(sum(text_lengths) / len(text_lengths), 1) if text_lengths else 0
        }

    def _analyze_feedback(self, results: List[ProcessingResult]) -> Dict[str, Any]:
        """Count extracted feedback per category and parser warnings."""
        category_counts = {category.display_name: 0 for category in Category}
        total_records = 0
        total_warnings = 0
        files_with_warnings = []

        for result in results:
            for record in result.records:
                category_counts[record.category.display_name] += 1
                total_records += 1
            if result.warnings:
                total_warnings += len(result.warnings)
                files_with_warnings.append(result.file_name)

        successful = [r for r in results if r.is_successful()]

        return {
            'total_records': total_records,
            'records_by_category': category_counts,
            'average_records_per_file': round(total_records / len(successful), 2) if successful else 0,
            'total_warnings': total_warnings,
            'files_with_warnings': files_with_warnings
        }

    def _analyze_errors(self,
                        results: List[ProcessingResult],
                        error_summary: Dict[str, Any]) -> Dict[str, Any]:
        """Analyze error patterns and provide detailed error breakdown."""
        if not results:
            return {'total_errors': 0, 'error_categories': {}, 'common_issues': []}

        error_categories = {
            'ocr_errors': [],
            'file_errors': [],
            'no_feedback_found': [],
            'other_errors': []
        }

        error_message_patterns = {}

        for result in results:
            if result.status in ['fail', 'error'] and result.error_message:
                error_msg = result.error_message.lower()

                if 'ocr' in error_msg or 'vision' in error_msg or 'rate limit' in error_msg or 'timeout' in error_msg:
                    error_categories['ocr_errors'].append(result)
                elif 'no feedback' in error_msg:
                    error_categories['no_feedback_found'].append(result)
                elif 'file' in error_msg or 'permission' in error_msg or 'not found' in error_msg:
                    error_categories['file_errors'].append(result)
                else:
                    error_categories['other_errors'].append(result)

                for word in self._extract_error_keywords(error_msg):
                    error_message_patterns[word] = error_message_patterns.get(word, 0) + 1

        common_patterns = sorted(error_message_patterns.items(), key=lambda x: x[1], reverse=True)[:5]

        return {
            'total_errors': sum(len(errors) for errors in error_categories.values()),
            'error_categories': {
                category: len(errors) for category, errors in error_categories.items()
            },
            'error_message_patterns': dict(common_patterns),
            'common_issues': self._identify_common_issues(error_categories, common_patterns),
            'error_summary_from_handler': error_summary
        }

    def _extract_error_keywords(self, error_message: str) -> List[str]:
        """Extract meaningful keywords from error messages."""
        keywords = [
            'timeout', 'rate limit', 'ocr', 'permission', 'not found', 'corrupted',
            'invalid', 'no text', 'no feedback', 'network', 'connection',
            'file', 'format', 'size', 'encoding', 'credential'
        ]

        return [keyword for keyword in keywords if keyword in error_message]

    def _identify_common_issues(self,
                                error_categories: Dict[str, List],
                                common_patterns: List[tuple]) -> List[str]:
        """Identify common issues based on error analysis."""
        issues = []

        total_errors = sum(len(errors) for errors in error_categories.values())

        if total_errors > 0:
            if len(error_categories.get('ocr_errors', [])) / total_errors > 0.3:
                issues.append("High rate of OCR errors - check network connectivity and Vision credentials")

            if len(error_categories.get('file_errors', [])) / total_errors > 0.2:
                issues.append("Multiple file access issues - check file permissions and paths")

            if len(error_categories.get('no_feedback_found', [])) / total_errors > 0.4:
                issues.append("Many inputs had no recognizable labels - check the feedback sheet template")

        for pattern, count in common_patterns:
            if count > 3:
                if pattern == 'timeout':
                    issues.append("Frequent timeout errors - consider increasing REQUEST_TIMEOUT")
                elif pattern == 'rate limit':
                    issues.append("Rate limiting detected - reduce concurrent workers")
                elif pattern == 'encoding':
                    issues.append("Text decoding problems - save transcripts as UTF-8")

        return issues

    def _calculate_performance_metrics(self,
                                       stats: Dict[str, Any],
                                       results: List[ProcessingResult]) -> Dict[str, Any]:
        """Calculate throughput metrics."""
        total_processed = len(results)
        processing_duration = stats.get('processing_duration', 0)

        if total_processed == 0 or processing_duration == 0:
            return {
                'files_per_second': 0,
                'average_file_processing_time_seconds': 0,
                'throughput_analysis': 'No data available'
            }

        files_per_second = total_processed / processing_duration
        avg_file_time = processing_duration / total_processed

        if files_per_second > 2:
            throughput_analysis = "Excellent throughput"
        elif files_per_second > 1:
            throughput_analysis = "Good throughput"
        elif files_per_second > 0.5:
            throughput_analysis = "Moderate throughput"
        else:
            throughput_analysis = "Low throughput - OCR latency dominates"

        return {
            'files_per_second': round(files_per_second, 2),
            'average_file_processing_time_seconds': round(avg_file_time, 2),
            'total_processing_time_minutes': round(processing_duration / 60, 2),
            'throughput_analysis': throughput_analysis
        }

    def _generate_recommendations(self,
                                  results: List[ProcessingResult],
                                  error_summary: Dict[str, Any]) -> List[str]:
        """Generate actionable recommendations based on processing results."""
        if not results:
            return ["No processing results available for analysis"]

        recommendations = []

        total_files = len(results)
        successful = sum(1 for r in results if r.status == 'pass')
        failed = sum(1 for r in results if r.status == 'fail')
        errors = sum(1 for r in results if r.status == 'error')
        warned = sum(1 for r in results if r.warnings)

        success_rate = successful / total_files * 100

        if success_rate < 50:
            recommendations.append("Critical: Very low success rate (<50%). Check scan quality and label formatting.")
        elif success_rate < 70:
            recommendations.append("Warning: Moderate success rate (<70%). Review inputs that produced no feedback.")
        elif success_rate > 90:
            recommendations.append("Excellent: High success rate (>90%). Current configuration is working well.")

        if errors > total_files * 0.2:
            recommendations.append("High error rate detected. Check OCR connectivity, file permissions, and credentials.")

        if failed > total_files * 0.3:
            recommendations.append("Many inputs produced no feedback. Make sure labels such as ##Positive## "
                                   "or [Bad] are written clearly.")

        if warned:
            recommendations.append(f"{warned} input(s) had unterminated labels. Review them for feedback "
                                   f"the parser could not attribute.")

        error_counts = error_summary.get('error_counts_by_type', {})
        for error_type, count in error_counts.items():
            if count > 3:
                if error_type.startswith('api_'):
                    recommendations.append(f"Frequent OCR errors ({count}). Check network stability and API quota.")
                elif error_type == 'no_feedback_found':
                    recommendations.append(f"No feedback found in {count} inputs. Re-check the OCR text.")

        if not recommendations:
            recommendations.append("Processing completed successfully with no major issues identified.")

        return recommendations

    def _format_detailed_results(self, results: List[ProcessingResult]) -> List[Dict[str, Any]]:
        """Format detailed results for inclusion in report."""
        detailed_results = []

        for result in results:
            result_dict = {
                'file_name': result.file_name,
                'status': result.status,
                'processing_timestamp': result.processing_timestamp.isoformat() if result.processing_timestamp else None,
                'error_message': result.error_message,
                'has_data': result.has_data(),
                'text_length': result.text_length,
                'records': [record.to_dict() for record in result.records],
                'warnings': [warning.message for warning in result.warnings]
            }
            detailed_results.append(result_dict)

        return detailed_results

    def _save_report_to_file(self, report: Dict[str, Any], output_file: str) -> None:
        """Save report to JSON file."""
        try:
            output_path = Path(output_file)
            output_path.parent.mkdir(parents=True, exist_ok=True)

            with open(output_path, 'w', encoding='utf-8') as f:
                json.dump(report, f, indent=2, ensure_ascii=False, default=str)

            self.logger.info(f"Processing report saved to: {output_path}")

        except OSError as e:
            self.logger.error(f"Failed to save report to {output_file}: {e}")

    def generate_summary_text(self, report: Dict[str, Any]) -> str:
        """
        Generate a human-readable text summary from the report.

        Args:
            report: Processing report dictionary

        Returns:
            Formatted text summary
        """
        summary_lines = []

        summary_lines.append("=== FEEDBACK EXTRACTION REPORT ===")
        summary_lines.append(f"Generated: {report['report_metadata']['report_generated_at']}")
        summary_lines.append("")

        proc_summary = report['processing_summary']
        summary_lines.append("PROCESSING SUMMARY:")
        summary_lines.append(f"  Total files found: {proc_summary['total_files_found']}")
        summary_lines.append(f"  Files processed: {proc_summary['total_files_processed']}")
        summary_lines.append(f"  Successful: {proc_summary['successful_extractions']}")
        summary_lines.append(f"  No feedback found: {proc_summary['failed_extractions']}")
        summary_lines.append(f"  Errors: {proc_summary['processing_errors']}")
        summary_lines.append(f"  Success rate: {proc_summary['success_rate_percent']}%")
        summary_lines.append(f"  Processing time: {proc_summary['processing_duration_seconds']:.1f} seconds")
        summary_lines.append("")

        feedback = report['feedback_analysis']
        summary_lines.append("FEEDBACK EXTRACTED:")
        summary_lines.append(f"  Total records: {feedback['total_records']}")
        for display_name, count in feedback['records_by_category'].items():
            summary_lines.append(f"  {display_name}: {count}")
        if feedback['total_warnings']:
            summary_lines.append(f"  Parser warnings: {feedback['total_warnings']}")
        summary_lines.append("")

        perf_metrics = report['performance_metrics']
        summary_lines.append("PERFORMANCE METRICS:")
        summary_lines.append(f"  Throughput: {perf_metrics['files_per_second']} files/second")
        summary_lines.append(f"  Average processing time: "
                             f"{perf_metrics['average_file_processing_time_seconds']:.2f} seconds/file")
        summary_lines.append(f"  Assessment: {perf_metrics['throughput_analysis']}")
        summary_lines.append("")

        error_analysis = report['error_analysis']
        if error_analysis['total_errors'] > 0:
            summary_lines.append("ERROR ANALYSIS:")
            summary_lines.append(f"  Total errors: {error_analysis['total_errors']}")
            for category, count in error_analysis['error_categories'].items():
                if count > 0:
                    summary_lines.append(f"  {category.replace('_', ' ').title()}: {count}")
            summary_lines.append("")

        recommendations = report['recommendations']
        if recommendations:
            summary_lines.append("RECOMMENDATIONS:")
            for i, rec in enumerate(recommendations, 1):
                summary_lines.append(f"  {i}. {rec}")
            summary_lines.append("")

        summary_lines.append("=== END REPORT ===")

        return "\n".join(summary_lines)
